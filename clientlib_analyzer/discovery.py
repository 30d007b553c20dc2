"""File enumeration and role assignment under a repository root."""

from __future__ import annotations

import enum
import fnmatch
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from clientlib_analyzer.errors import FileSkipped
from clientlib_analyzer.models import ScanRules

logger = logging.getLogger(__name__)


class FileRole(enum.Enum):
    MANIFEST = "manifest"
    CONFIG = "config"
    TEMPLATE = "template"
    SOURCE = "source"


@dataclass
class CandidateFile:
    path: Path
    relative: str  # POSIX path relative to the root
    roles: frozenset[FileRole]

    def has(self, role: FileRole) -> bool:
        return role in self.roles


def matches_any(relative: str, patterns: Iterable[str]) -> bool:
    """Glob match on a root-relative POSIX path; ``**/x`` also matches ``x`` at the root."""
    for pattern in patterns:
        if fnmatch.fnmatchcase(relative, pattern):
            return True
        if pattern.startswith("**/") and fnmatch.fnmatchcase(relative, pattern[3:]):
            return True
    return False


def classify(relative: str, rules: ScanRules) -> frozenset[FileRole]:
    roles: set[FileRole] = set()
    if matches_any(relative, rules.manifest_patterns):
        roles.add(FileRole.MANIFEST)
    if matches_any(relative, rules.config_patterns):
        roles.add(FileRole.CONFIG)
    if matches_any(relative, rules.template_patterns):
        roles.add(FileRole.TEMPLATE)
    if matches_any(relative, rules.source_patterns):
        roles.add(FileRole.SOURCE)
    return frozenset(roles)


def should_skip(parts: Iterable[str], skip_dirs: Iterable[str]) -> bool:
    skip_dirs = list(skip_dirs)
    for part in parts:
        for pattern in skip_dirs:
            if fnmatch.fnmatch(part, pattern):
                return True
    return False


def _log_walk_error(err: OSError) -> None:
    logger.warning("Cannot list %s: %s", err.filename, err.strerror)


def iter_candidate_files(
    root: Path,
    rules: ScanRules,
    skip_dirs: Iterable[str],
) -> Iterator[CandidateFile]:
    """Yield every file under root that matches at least one rule, in sorted order."""
    skip_dirs = list(skip_dirs)
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        dirnames[:] = sorted(d for d in dirnames if not should_skip([d], skip_dirs))
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            relative = path.relative_to(root).as_posix()
            roles = classify(relative, rules)
            if roles:
                yield CandidateFile(path=path, relative=relative, roles=roles)


def read_source(path: Path) -> str:
    """Read a text file as UTF-8, turning failures into FileSkipped."""
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise FileSkipped(path, f"not valid UTF-8 ({e.reason})") from e
    except OSError as e:
        raise FileSkipped(path, f"unreadable ({e.strerror or e})") from e
