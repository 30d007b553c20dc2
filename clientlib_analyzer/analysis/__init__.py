"""Graph construction and analyses built on top of it."""

from clientlib_analyzer.analysis.dependency_graph import DependencyGraphBuilder
from clientlib_analyzer.analysis.graph_models import (
    DependencyEdge,
    DependencyGraph,
    DuplicateEntry,
    EdgeKind,
)

__all__ = [
    "DependencyEdge",
    "DependencyGraph",
    "DependencyGraphBuilder",
    "DuplicateEntry",
    "EdgeKind",
]
