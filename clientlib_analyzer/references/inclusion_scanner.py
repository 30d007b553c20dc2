"""HTL inclusion-call scanner: ``${clientlib.css @ categories='a,b'}`` and friends."""

from __future__ import annotations

import itertools
import re
from pathlib import Path

from clientlib_analyzer.models import ReferenceKind, UsageReference
from clientlib_analyzer.normalize import literal_items
from clientlib_analyzer.references.base import BaseReferenceScanner, LineIndex

# Both spellings of the template helper variable
HELPER_NAMES: tuple[str, ...] = ("clientlib", "clientLib")

RESOURCE_KINDS: dict[str, ReferenceKind] = {
    "css": ReferenceKind.STYLE_INCLUSION,
    "js": ReferenceKind.SCRIPT_INCLUSION,
    "all": ReferenceKind.COMBINED_INCLUSION,
}

# categories='a, b'  or  categories=['a', 'b']
CALL_STYLES: dict[str, str] = {
    "string": r"""(?P<quote>['"])(?P<value>[^'"}]*)(?P=quote)""",
    "array": r"\[(?P<body>[^\]}]*)\]",
}


def _build_patterns() -> list[tuple[ReferenceKind, str, re.Pattern]]:
    patterns = []
    for helper, (resource, kind), (style, argument) in itertools.product(
        HELPER_NAMES, RESOURCE_KINDS.items(), CALL_STYLES.items(),
    ):
        regex = re.compile(
            r"\$\{\s*" + re.escape(helper) + r"\." + resource
            + r"\b\s*@[^}]*?(?<![\w-])categories\s*=\s*" + argument
        )
        patterns.append((kind, style, regex))
    return patterns


INCLUSION_PATTERNS = _build_patterns()


class InclusionScanner(BaseReferenceScanner):
    """Finds categories named by clientlib inclusion calls in templates."""

    def scan_text(self, text: str, file_path: Path) -> list[UsageReference]:
        lines = LineIndex(text)
        found: list[tuple[int, UsageReference]] = []

        for kind, style, regex in INCLUSION_PATTERNS:
            for m in regex.finditer(text):
                if style == "array":
                    items = literal_items(m.group("body"))
                else:
                    items = m.group("value").split(",")
                line = lines.line_at(m.start())
                for item in items:
                    category = item.strip()
                    if category:
                        found.append((m.start(), UsageReference(
                            category=category,
                            file=file_path,
                            kind=kind,
                            line=line,
                        )))

        found.sort(key=lambda pair: pair[0])
        return [ref for _, ref in found]
