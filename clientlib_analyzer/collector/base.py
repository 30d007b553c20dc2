"""Abstract base collector."""

from __future__ import annotations

import abc
import logging
from pathlib import Path

from clientlib_analyzer.collector.assets import discover_assets
from clientlib_analyzer.models import DEFAULT_SKIP_DIRS, DeclarationKind, LibraryDeclaration

logger = logging.getLogger(__name__)


class BaseCollector(abc.ABC):
    """Base class for declaration collectors, one per declaration file format."""

    kind: DeclarationKind

    def __init__(self, skip_dirs: list[str] | None = None):
        self.skip_dirs = list(skip_dirs) if skip_dirs is not None else list(DEFAULT_SKIP_DIRS)

    @abc.abstractmethod
    def parse(self, file_path: Path) -> LibraryDeclaration | None:
        """Parse one file; None when it declares nothing."""

    def collect_file(self, file_path: Path) -> LibraryDeclaration | None:
        """Parse a file and attach the assets found under its directory.

        Raises FileSkipped when the file cannot be read or parsed.
        """
        declaration = self.parse(file_path)
        if declaration is None:
            return None
        declaration.assets = discover_assets(
            declaration.source_path,
            skip_dirs=self.skip_dirs,
            exclude={file_path},
        )
        logger.debug(
            "%s declares %s (%d css, %d js)",
            file_path, declaration.category,
            len(declaration.assets.css), len(declaration.assets.js),
        )
        return declaration
