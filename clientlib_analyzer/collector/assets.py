"""Asset discovery under a declaration's directory."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from clientlib_analyzer.discovery import should_skip
from clientlib_analyzer.models import AssetSet

STYLE_EXTENSIONS: tuple[str, ...] = (".css", ".less", ".scss")
SCRIPT_EXTENSIONS: tuple[str, ...] = (".js", ".mjs", ".ts")

# Third-party subtrees never count as the declaration's own assets
VENDOR_DIRS: tuple[str, ...] = ("node_modules", "bower_components", "vendor")


def discover_assets(
    directory: Path,
    skip_dirs: Iterable[str] = (),
    exclude: Iterable[Path] = (),
) -> AssetSet:
    """List style and script files under directory as sorted relative POSIX paths."""
    skip = list(VENDOR_DIRS) + [d for d in skip_dirs if d not in VENDOR_DIRS]
    excluded = {Path(p).resolve() for p in exclude}
    assets = AssetSet()

    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames[:] = [d for d in dirnames if not should_skip([d], skip)]
        for filename in filenames:
            path = Path(dirpath) / filename
            if path.resolve() in excluded:
                continue
            relative = path.relative_to(directory).as_posix()
            suffix = path.suffix.lower()
            if suffix in STYLE_EXTENSIONS:
                assets.css.append(relative)
            elif suffix in SCRIPT_EXTENSIONS:
                assets.js.append(relative)

    assets.css.sort()
    assets.js.sort()
    return assets
