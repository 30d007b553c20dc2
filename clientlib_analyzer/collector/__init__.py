"""Collector registry and dispatcher."""

from __future__ import annotations

import logging
from pathlib import Path

from clientlib_analyzer.collector.base import BaseCollector
from clientlib_analyzer.collector.config_collector import ConfigCollector
from clientlib_analyzer.collector.manifest_collector import ManifestCollector
from clientlib_analyzer.discovery import FileRole, iter_candidate_files
from clientlib_analyzer.errors import FileSkipped
from clientlib_analyzer.models import DEFAULT_SKIP_DIRS, Diagnostic, LibraryDeclaration, ScanRules

logger = logging.getLogger(__name__)


def _get_collectors(skip_dirs: list[str] | None = None) -> dict[FileRole, BaseCollector]:
    return {
        FileRole.MANIFEST: ManifestCollector(skip_dirs=skip_dirs),
        FileRole.CONFIG: ConfigCollector(skip_dirs=skip_dirs),
    }


def collect_declaration(
    file_path: Path,
    roles: frozenset[FileRole],
    skip_dirs: list[str] | None = None,
) -> LibraryDeclaration | None:
    """Run every collector matching the file's roles; the first declaration wins.

    Raises FileSkipped when the file cannot be read or parsed.
    """
    for role, collector in _get_collectors(skip_dirs).items():
        if role not in roles:
            continue
        declaration = collector.collect_file(file_path)
        if declaration is not None:
            return declaration
    return None


def collect_declarations(
    root: Path,
    rules: ScanRules | None = None,
    skip_dirs: list[str] | None = None,
) -> tuple[list[LibraryDeclaration], list[Diagnostic]]:
    """Collect declarations from every manifest and config file under root."""
    rules = rules or ScanRules()
    skip_dirs = list(skip_dirs) if skip_dirs is not None else list(DEFAULT_SKIP_DIRS)
    declarations: list[LibraryDeclaration] = []
    diagnostics: list[Diagnostic] = []

    for candidate in iter_candidate_files(root, rules, skip_dirs):
        if not (candidate.has(FileRole.MANIFEST) or candidate.has(FileRole.CONFIG)):
            continue
        try:
            declaration = collect_declaration(candidate.path, candidate.roles, skip_dirs)
        except FileSkipped as e:
            logger.warning("Skipping %s", e)
            diagnostics.append(Diagnostic(file=candidate.path, message=e.reason))
            continue
        if declaration is not None:
            declarations.append(declaration)

    return declarations, diagnostics


__all__ = [
    "BaseCollector",
    "ConfigCollector",
    "ManifestCollector",
    "collect_declaration",
    "collect_declarations",
]
