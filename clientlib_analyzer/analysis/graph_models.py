"""Data models for the dependency graph."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class EdgeKind(enum.Enum):
    EMBED = "embed"
    DEPENDENCY = "dependency"


@dataclass(frozen=True)
class DependencyEdge:
    source: str
    target: str
    kind: EdgeKind

    @property
    def sort_key(self) -> tuple[str, str, str]:
        return (self.source, self.target, self.kind.value)

    def to_dict(self) -> dict[str, str]:
        return {"from": self.source, "to": self.target, "kind": self.kind.value}


@dataclass(frozen=True)
class DuplicateEntry:
    category: str
    paths: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"category": self.category, "paths": list(self.paths)}


@dataclass(frozen=True)
class DependencyGraph:
    """Read-only snapshot produced by one analysis pass."""
    nodes: tuple[str, ...] = ()
    edges: tuple[DependencyEdge, ...] = ()
    duplicates: tuple[DuplicateEntry, ...] = ()
    unused: tuple[str, ...] = ()
    circular: tuple[tuple[str, ...], ...] = ()

    def successors(self, category: str) -> list[str]:
        return sorted({e.target for e in self.edges if e.source == category})

    def predecessors(self, category: str) -> list[str]:
        return sorted({e.source for e in self.edges if e.target == category})

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": list(self.nodes),
            "edges": [e.to_dict() for e in self.edges],
            "duplicates": [d.to_dict() for d in self.duplicates],
            "unused": list(self.unused),
            "circular": [list(c) for c in self.circular],
        }


@dataclass
class TransitiveDeps:
    root: str
    direct: set[str] = field(default_factory=set)
    all_transitive: set[str] = field(default_factory=set)
