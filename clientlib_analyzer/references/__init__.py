"""Reference scanner registry and dispatcher."""

from __future__ import annotations

from pathlib import Path

from clientlib_analyzer.discovery import FileRole, read_source
from clientlib_analyzer.models import UsageReference
from clientlib_analyzer.references.base import BaseReferenceScanner
from clientlib_analyzer.references.generic_scanner import GenericScanner
from clientlib_analyzer.references.inclusion_scanner import InclusionScanner

_INCLUSION = InclusionScanner()
_GENERIC = GenericScanner()


def scan_text(text: str, file_path: Path, include_calls: bool = True) -> list[UsageReference]:
    """Run the inclusion-call scanner (optionally) and the generic scanner over text."""
    references: list[UsageReference] = []
    if include_calls:
        references.extend(_INCLUSION.scan_text(text, file_path))
    references.extend(_GENERIC.scan_text(text, file_path))
    return references


def scan_references(file_path: Path, roles: frozenset[FileRole]) -> list[UsageReference]:
    """Scan one file according to its roles.

    Templates get both scanners, other source files only the generic one.
    Raises FileSkipped when the file cannot be read.
    """
    if FileRole.TEMPLATE not in roles and FileRole.SOURCE not in roles:
        return []
    text = read_source(file_path)
    return scan_text(text, file_path, include_calls=FileRole.TEMPLATE in roles)


__all__ = [
    "BaseReferenceScanner",
    "GenericScanner",
    "InclusionScanner",
    "scan_references",
    "scan_text",
]
