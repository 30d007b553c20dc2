"""Analysis exceptions."""

from __future__ import annotations

from pathlib import Path


class RepositoryRootError(Exception):
    """The repository root is missing, not a directory, or unreadable."""

    def __init__(self, root: Path, reason: str):
        self.root = root
        self.reason = reason
        super().__init__(f"Cannot scan {root}: {reason}")


class FileSkipped(Exception):
    """A single file could not be read or parsed; the scan continues without it."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
