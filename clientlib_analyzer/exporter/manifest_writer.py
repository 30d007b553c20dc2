"""Write a proposed client library folder (.content.xml, css.txt, js.txt)."""

from __future__ import annotations

import re
from pathlib import Path

from clientlib_analyzer.analysis.optimizer import ReducedManifest, render_clientlib_xml
from clientlib_analyzer.models import LibraryDeclaration


def _folder_name(category: str) -> str:
    return "clientlib-" + re.sub(r"[^a-zA-Z0-9_-]+", "-", category).strip("-")


def _asset_list(kind: str, assets: list[str], declaration: LibraryDeclaration) -> str:
    lines = [
        f"# {kind.upper()} assets carried over from {declaration.category}",
        f"# (paths relative to {declaration.source_path})",
        "#base=.",
    ]
    lines.extend(assets)
    return "\n".join(lines) + "\n"


def write_manifest(
    reduced: ReducedManifest,
    declaration: LibraryDeclaration,
    output_dir: Path,
) -> Path:
    """Create ``output_dir/clientlib-<category>/`` and return its path."""
    folder = output_dir / _folder_name(reduced.category)
    folder.mkdir(parents=True, exist_ok=True)

    (folder / ".content.xml").write_text(
        render_clientlib_xml(
            reduced.category,
            reduced.kept_embeds,
            reduced.dependencies,
            allow_proxy=reduced.allow_proxy,
        ),
        encoding="utf-8",
    )
    (folder / "css.txt").write_text(_asset_list("css", declaration.assets.css, declaration), encoding="utf-8")
    (folder / "js.txt").write_text(_asset_list("js", declaration.assets.js, declaration), encoding="utf-8")
    return folder
