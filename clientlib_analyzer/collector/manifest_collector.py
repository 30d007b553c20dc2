"""Manifest collector: reads client library folders from JCR content XML."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from clientlib_analyzer.collector.base import BaseCollector
from clientlib_analyzer.errors import FileSkipped
from clientlib_analyzer.models import DeclarationKind, LibraryDeclaration
from clientlib_analyzer.normalize import parse_bool, split_values, strip_type_hint

LIBRARY_FOLDER_TYPE = "cq:ClientLibraryFolder"

# String-valued attributes copied into flags when present
_STRING_FLAGS = ("longCacheKey", "cssProcessor", "jsProcessor", "channels")


def _local_name(name: str) -> str:
    """Drop the ``{namespace}`` or ``prefix:`` part of an attribute name."""
    if "}" in name:
        return name.rsplit("}", 1)[1]
    if ":" in name:
        return name.split(":", 1)[1]
    return name


def _attributes(element: ET.Element) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for name, value in element.attrib.items():
        attrs.setdefault(_local_name(name), value)
    return attrs


class ManifestCollector(BaseCollector):
    kind = DeclarationKind.MANIFEST

    def parse(self, file_path: Path) -> LibraryDeclaration | None:
        try:
            root = ET.fromstring(file_path.read_bytes())
        except ET.ParseError as e:
            raise FileSkipped(file_path, f"invalid XML ({e})") from e
        except OSError as e:
            raise FileSkipped(file_path, f"unreadable ({e.strerror or e})") from e

        return self.parse_element(root, file_path)

    def parse_element(self, element: ET.Element, file_path: Path) -> LibraryDeclaration | None:
        attrs = _attributes(element)
        if strip_type_hint(attrs.get("primaryType", "")) != LIBRARY_FOLDER_TYPE:
            return None

        categories = split_values(attrs.get("categories"))
        if not categories:
            return None

        flags: dict[str, bool | str] = {"kind": self.kind.value}
        if "allowProxy" in attrs:
            allow_proxy = parse_bool(attrs["allowProxy"])
            if allow_proxy is not None:
                flags["allowProxy"] = allow_proxy
        for name in _STRING_FLAGS:
            if name in attrs:
                flags[name] = strip_type_hint(attrs[name])

        return LibraryDeclaration(
            category=categories[0],
            aliases=categories[1:],
            source_path=file_path.parent,
            embeds=split_values(attrs.get("embed")),
            dependencies=split_values(attrs.get("dependencies")),
            flags=flags,
            declared_in=file_path,
        )
