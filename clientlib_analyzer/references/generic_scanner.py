"""Generic reference scanner: key/value and attribute shapes across markup, script and data files."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from clientlib_analyzer.models import ReferenceKind, UsageReference
from clientlib_analyzer.normalize import literal_items, split_values
from clientlib_analyzer.references.base import BaseReferenceScanner, LineIndex

_POLICY_KEYS = r"clientlibs(?:JsHead)?"

_ARRAY = r"\[(?P<body>[^\]]*)\]"
_STRING = r"""(?P<quote>['"])(?P<value>[^'"\n]*)(?P=quote)"""

# Template expressions belong to the inclusion scanner
_EXPRESSION_RE = re.compile(r"\$\{[^}]*\}")


def _key(name: str) -> str:
    """A bare, single- or double-quoted object key followed by a colon."""
    return rf"""(?<![\w$])(?P<kq>['"]?)(?:{name})(?P=kq)\s*:\s*"""


def _attribute(name: str) -> str:
    return rf"""(?<![\w:.-])(?:{name})\s*=\s*(?P<quote>['"])(?P<value>[^'"]*)(?P=quote)"""


@dataclass(frozen=True)
class ReferenceShape:
    kind: ReferenceKind
    pattern: re.Pattern
    value_shape: str  # "array" | "scalar" | "attribute"


REFERENCE_SHAPES: tuple[ReferenceShape, ...] = (
    ReferenceShape(ReferenceKind.POLICY_ARRAY, re.compile(_key(_POLICY_KEYS) + _ARRAY), "array"),
    ReferenceShape(ReferenceKind.POLICY_SCALAR, re.compile(_key(_POLICY_KEYS) + _STRING), "scalar"),
    ReferenceShape(ReferenceKind.POLICY_ATTRIBUTE, re.compile(_attribute(_POLICY_KEYS)), "attribute"),
    ReferenceShape(ReferenceKind.COMPONENT_CONFIG, re.compile(_key("categories") + _ARRAY), "array"),
    ReferenceShape(ReferenceKind.COMPONENT_CONFIG_SCALAR, re.compile(_key("categories") + _STRING), "scalar"),
    ReferenceShape(ReferenceKind.CATEGORIES_ATTRIBUTE, re.compile(_attribute("categories")), "attribute"),
    ReferenceShape(ReferenceKind.CATEGORY_KEY, re.compile(_key("category") + _STRING), "scalar"),
    ReferenceShape(
        ReferenceKind.JS_FUNCTION_CALL,
        re.compile(r"""(?<![\w$])[\w$]*[Cc]lient[Ll]ibs?[\w$]*\s*\(\s*""" + _STRING),
        "scalar",
    ),
)


def _mask_expressions(text: str) -> str:
    """Blank out ``${...}`` expressions, keeping offsets and line breaks."""
    def _blank(m: re.Match) -> str:
        return "".join("\n" if ch == "\n" else " " for ch in m.group(0))
    return _EXPRESSION_RE.sub(_blank, text)


def _items(m: re.Match, value_shape: str) -> list[str]:
    if value_shape == "array":
        return literal_items(m.group("body"))
    if value_shape == "attribute":
        return split_values(m.group("value"))
    return [part.strip() for part in m.group("value").split(",")]


class GenericScanner(BaseReferenceScanner):
    """Tags every match with the label of the shape that matched."""

    def scan_text(self, text: str, file_path: Path) -> list[UsageReference]:
        masked = _mask_expressions(text)
        lines = LineIndex(masked)
        found: list[tuple[int, UsageReference]] = []

        for shape in REFERENCE_SHAPES:
            for m in shape.pattern.finditer(masked):
                line = lines.line_at(m.start())
                for category in _items(m, shape.value_shape):
                    if not category or "${" in category:
                        continue
                    found.append((m.start(), UsageReference(
                        category=category,
                        file=file_path,
                        kind=shape.kind,
                        line=line,
                    )))

        found.sort(key=lambda pair: pair[0])
        return [ref for _, ref in found]
