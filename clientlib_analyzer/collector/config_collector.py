"""Build-tool config collector: pulls literal clientlib settings out of JS config files.

The file is never executed. Only plainly written forms are recognized::

    categories: ["site.base"]        category: 'site.base'
    embed: ["core.wcm.components.image.v3", 'site.grid']
    dependencies: "granite.jquery"
    allowProxy: true

Keys may be bare or quoted. Computed names, identifiers, spreads and template
strings are left out of the result.
"""

from __future__ import annotations

import re
from pathlib import Path

from clientlib_analyzer.collector.base import BaseCollector
from clientlib_analyzer.discovery import read_source
from clientlib_analyzer.models import DeclarationKind, LibraryDeclaration
from clientlib_analyzer.normalize import literal_items


def _key(name: str) -> str:
    return rf"""(?<![\w$])(?:"{name}"|'{name}'|{name})\s*:\s*"""


_ARRAY = r"\[(?P<body>[^\]]*)\]"
_STRING = r"""(?P<quote>['"])(?P<value>[^'"\n]*)(?P=quote)"""

_CATEGORIES_RE = re.compile(_key("categories") + rf"(?:{_ARRAY}|{_STRING})")
_CATEGORY_RE = re.compile(_key("category") + _STRING)
_EMBED_RE = re.compile(_key("embed") + rf"(?:{_ARRAY}|{_STRING})")
_DEPENDENCIES_RE = re.compile(_key("dependencies") + rf"(?:{_ARRAY}|{_STRING})")
_ALLOW_PROXY_RE = re.compile(_key("allowProxy") + r"(?P<value>true|false)\b")

_LINE_COMMENT_RE = re.compile(r"^\s*//.*$", re.MULTILINE)
_BLOCK_COMMENT_RE = re.compile(r"(?:^|(?<=\s))/\*.*?\*/", re.DOTALL)
_SPREAD_RE = re.compile(r"\.\.\.\s*([A-Za-z_$][\w$]*)")


def _literal(value: str) -> bool:
    return bool(value) and "${" not in value


def _values(match: re.Match | None) -> list[str]:
    """Literal strings from an array-or-string match, order kept."""
    if match is None:
        return []
    if match.group("body") is not None:
        items = literal_items(match.group("body"))
    else:
        items = [part.strip() for part in match.group("value").split(",")]
    return [item for item in items if _literal(item)]


def object_span(source: str, pos: int) -> tuple[int, int]:
    """Bounds of the innermost ``{...}`` literal enclosing pos.

    String literals and ``//`` comments are skipped while counting braces.
    Falls back to the whole text when pos is not inside an object.
    """
    stack: list[int] = []
    start: int | None = None
    quote: str | None = None
    i = 0
    while i < len(source):
        if start is None and i >= pos:
            if not stack:
                return 0, len(source)
            start = stack[-1]
        ch = source[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "'\"`":
            quote = ch
        elif source.startswith("//", i):
            newline = source.find("\n", i)
            i = len(source) if newline == -1 else newline
            continue
        elif ch == "{":
            stack.append(i)
        elif ch == "}" and stack:
            opened = stack.pop()
            if opened == start:
                return start, i + 1
        i += 1
    if start is None:
        return 0, len(source)
    return start, len(source)


def _spread_bodies(source: str, body: str) -> list[str]:
    """Object literals spread into body (``...base``) that are declared in source."""
    bodies = []
    for name in _SPREAD_RE.findall(body):
        decl = re.search(rf"(?<![\w$])(?:const|let|var)\s+{re.escape(name)}\s*=\s*\{{", source)
        if decl:
            start, end = object_span(source, decl.end())
            bodies.append(source[start:end])
    return bodies


def _search(regex: re.Pattern, scopes: list[str]) -> re.Match | None:
    # Own keys win over spread ones
    for scope in scopes:
        m = regex.search(scope)
        if m:
            return m
    return None


class ConfigCollector(BaseCollector):
    kind = DeclarationKind.CONFIG

    def parse(self, file_path: Path) -> LibraryDeclaration | None:
        return self.parse_text(read_source(file_path), file_path)

    def parse_text(self, source: str, file_path: Path) -> LibraryDeclaration | None:
        source = _BLOCK_COMMENT_RE.sub("", source)
        source = _LINE_COMMENT_RE.sub("", source)

        found = self._categories(source)
        if found is None:
            return None
        match, categories = found

        # Only the lib object that names the category, plus base configs it spreads
        start, end = object_span(source, match.start())
        lib = source[start:end]
        scopes = [lib] + _spread_bodies(source, lib)

        flags: dict[str, bool | str] = {"kind": self.kind.value}
        allow_proxy = _search(_ALLOW_PROXY_RE, scopes)
        if allow_proxy:
            flags["allowProxy"] = allow_proxy.group("value") == "true"

        return LibraryDeclaration(
            category=categories[0],
            aliases=categories[1:],
            source_path=file_path.parent,
            embeds=_values(_search(_EMBED_RE, scopes)),
            dependencies=_values(_search(_DEPENDENCIES_RE, scopes)),
            flags=flags,
            declared_in=file_path,
        )

    @staticmethod
    def _categories(source: str) -> tuple[re.Match, list[str]] | None:
        # Whichever of categories/category is written first wins
        candidates = [m for m in (_CATEGORIES_RE.search(source), _CATEGORY_RE.search(source)) if m]
        for match in sorted(candidates, key=lambda m: m.start()):
            if match.re is _CATEGORY_RE:
                value = match.group("value").strip()
                if _literal(value):
                    return match, [value]
            else:
                values = _values(match)
                if values:
                    return match, values
        return None
