"""Value normalization shared by manifest parsing and attribute scanning."""

from __future__ import annotations

import re

# JCR property type hints such as {Boolean}true or {String[]}[a,b]
_TYPE_HINT_RE = re.compile(r"^\{[A-Za-z]+(?:\[\])?\}")
_SEPARATOR_RE = re.compile(r"[,\s]+")


def strip_type_hint(value: str) -> str:
    return _TYPE_HINT_RE.sub("", value.strip(), count=1)


def split_values(value: str | list[str] | None) -> list[str]:
    """Split a scalar-or-list property into tokens, order kept, empties dropped.

    >>> split_values("[a.b, c.d]")
    ['a.b', 'c.d']
    >>> split_values("{String[]}[x y]")
    ['x', 'y']
    """
    if value is None:
        return []
    if isinstance(value, list):
        tokens: list[str] = []
        for item in value:
            tokens.extend(split_values(item))
        return tokens

    text = strip_type_hint(value)
    if text.startswith("[") and text.endswith("]"):
        text = text[1:-1]
    return [token for token in _SEPARATOR_RE.split(text) if token]


def parse_bool(value: str) -> bool | None:
    text = strip_type_hint(value).lower()
    if text == "true":
        return True
    if text == "false":
        return False
    return None


_QUOTED_LITERAL_RE = re.compile(r"""^(['"])([^'"\n]*)\1$""")


def literal_items(array_body: str) -> list[str]:
    """Items of an array literal that are plain quoted strings.

    Identifiers, concatenations, spreads and template strings are dropped.

    >>> literal_items("'a', b, 'c' + d, 'e'")
    ['a', 'e']
    """
    items: list[str] = []
    for element in array_body.split(","):
        m = _QUOTED_LITERAL_RE.match(element.strip())
        if m and m.group(2).strip():
            items.append(m.group(2).strip())
    return items
