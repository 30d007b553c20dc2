"""Reduced manifest proposal: trim a library's embeds down to what a page needs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable
from xml.sax.saxutils import quoteattr

from clientlib_analyzer.analysis.dependency_graph import DependencyGraphBuilder
from clientlib_analyzer.analysis.graph_models import DependencyGraph
from clientlib_analyzer.models import LibraryDeclaration, PageUsageSnapshot

logger = logging.getLogger(__name__)


@dataclass
class ReducedManifest:
    category: str  # category of the proposed library
    source_category: str
    kept_embeds: list[str] = field(default_factory=list)
    removed_embeds: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    allow_proxy: bool = True

    @property
    def reduction(self) -> int:
        """Share of embeds removed, in whole percent."""
        total = len(self.kept_embeds) + len(self.removed_embeds)
        if total == 0:
            return 0
        return round(len(self.removed_embeds) * 100 / total)

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "source_category": self.source_category,
            "kept_embeds": list(self.kept_embeds),
            "removed_embeds": list(self.removed_embeds),
            "dependencies": list(self.dependencies),
            "reduction": self.reduction,
        }


def embeds_used_by(declaration: LibraryDeclaration, snapshot: PageUsageSnapshot) -> list[str]:
    """Embeds whose category names one of the snapshot's components."""
    names = {c.rstrip("/").rsplit("/", 1)[-1].lower() for c in snapshot.components}
    names.discard("")
    return [e for e in declaration.embeds if any(name in e.lower() for name in names)]


def propose_reduced_manifest(
    declaration: LibraryDeclaration,
    graph: DependencyGraph,
    keep: Iterable[str],
    category: str | None = None,
) -> ReducedManifest:
    """Keep only embeds listed in keep, and never an embed that leads back to the library."""
    keep = set(keep)
    builder = DependencyGraphBuilder()
    reduced = ReducedManifest(
        category=category or f"{declaration.category}.reduced",
        source_category=declaration.category,
        dependencies=list(declaration.dependencies),
        allow_proxy=bool(declaration.flags.get("allowProxy", True)),
    )

    for embed in declaration.embeds:
        loops_back = (
            embed == declaration.category
            or declaration.category in builder.resolve_transitive(graph, embed).all_transitive
        )
        if embed in keep and not loops_back:
            if embed not in reduced.kept_embeds:
                reduced.kept_embeds.append(embed)
        elif embed not in reduced.removed_embeds:
            reduced.removed_embeds.append(embed)

    logger.info(
        "%s -> %s: kept %d, removed %d embed(s)",
        declaration.category, reduced.category,
        len(reduced.kept_embeds), len(reduced.removed_embeds),
    )
    return reduced


def render_clientlib_xml(
    category: str,
    embeds: list[str],
    dependencies: list[str] | None = None,
    allow_proxy: bool = True,
) -> str:
    """Render a cq:ClientLibraryFolder .content.xml."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<jcr:root xmlns:cq="http://www.day.com/jcr/cq/1.0" xmlns:jcr="http://www.jcp.org/jcr/1.0"',
        '    jcr:primaryType="cq:ClientLibraryFolder"',
        f'    allowProxy="{{Boolean}}{str(allow_proxy).lower()}"',
        f"    categories={quoteattr(f'[{category}]')}",
    ]
    if dependencies:
        lines.append(f"    dependencies={quoteattr('[' + ','.join(dependencies) + ']')}")
    if embeds:
        lines.append(f"    embed={quoteattr('[' + ','.join(embeds) + ']')}")
    lines[-1] += "/>"
    return "\n".join(lines) + "\n"
