"""Abstract base reference scanner."""

from __future__ import annotations

import abc
import bisect
from pathlib import Path

from clientlib_analyzer.discovery import read_source
from clientlib_analyzer.models import UsageReference


class LineIndex:
    """Maps character offsets in a text to 1-based line numbers."""

    def __init__(self, text: str):
        self._newlines = [i for i, ch in enumerate(text) if ch == "\n"]

    def line_at(self, offset: int) -> int:
        return bisect.bisect_left(self._newlines, offset) + 1


class BaseReferenceScanner(abc.ABC):
    """Base class for text scanners that find category mentions."""

    @abc.abstractmethod
    def scan_text(self, text: str, file_path: Path) -> list[UsageReference]:
        """Scan already-loaded text; an empty list when nothing matches."""

    def scan_file(self, file_path: Path) -> list[UsageReference]:
        return self.scan_text(read_source(file_path), file_path)
