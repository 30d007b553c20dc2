"""Dependency graph builder: edges, duplicates, unused categories and cycles."""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterable

from clientlib_analyzer.analysis.graph_models import (
    DependencyEdge,
    DependencyGraph,
    DuplicateEntry,
    EdgeKind,
    TransitiveDeps,
)
from clientlib_analyzer.models import LibraryDeclaration, UsageReference

logger = logging.getLogger(__name__)


class DependencyGraphBuilder:
    """Build a DependencyGraph from declarations and usage references."""

    def build(
        self,
        declarations: Iterable[LibraryDeclaration],
        references: Iterable[UsageReference],
    ) -> DependencyGraph:
        declarations = list(declarations)
        referenced = {ref.category for ref in references}

        # Step 1: Edges, one per embed and one per dependency entry
        edges = self._collect_edges(declarations)

        # Step 2: Nodes are everything declared, targeted or referenced
        declared = {name for decl in declarations for name in decl.categories}
        nodes = set(declared) | referenced
        for edge in edges:
            nodes.add(edge.source)
            nodes.add(edge.target)

        # Step 3: Duplicates
        duplicates = self.find_duplicates(declarations)

        # Step 4: Unused is restricted to declared categories; a folder reached
        # through any of its categories is in use
        used = referenced | {edge.target for edge in edges}
        unused = sorted({
            name
            for decl in declarations
            if not used.intersection(decl.categories)
            for name in decl.categories
        })

        # Step 5: Cycles
        forward = self._forward_index(edges)
        cycles = self.detect_cycles(forward)

        logger.debug(
            "graph: %d nodes, %d edges, %d duplicates, %d unused, %d cycles",
            len(nodes), len(edges), len(duplicates), len(unused), len(cycles),
        )
        return DependencyGraph(
            nodes=tuple(sorted(nodes)),
            edges=tuple(edges),
            duplicates=tuple(duplicates),
            unused=tuple(unused),
            circular=tuple(cycles),
        )

    def find_duplicates(self, declarations: list[LibraryDeclaration]) -> list[DuplicateEntry]:
        """Categories declared at two or more distinct paths, paths in declaration order."""
        paths_by_category: dict[str, list[str]] = {}
        for decl in declarations:
            path = str(decl.source_path)
            for name in decl.categories:
                paths = paths_by_category.setdefault(name, [])
                if path not in paths:
                    paths.append(path)

        return [
            DuplicateEntry(category=category, paths=tuple(paths))
            for category, paths in sorted(paths_by_category.items())
            if len(paths) >= 2
        ]

    def detect_cycles(self, forward: dict[str, list[str]]) -> list[tuple[str, ...]]:
        """Find every distinct cycle, deduplicated by node set.

        Each cycle is a closed walk ``(c0, c1, ..., c0)`` starting at its
        lexicographically smallest category. Only strongly connected
        components can hold a cycle, so the walk is confined to them.
        """
        found: list[tuple[str, ...]] = []
        seen_sets: set[frozenset[str]] = set()

        for component in self._strongly_connected(forward):
            if len(component) == 1:
                (only,) = component
                if only not in forward.get(only, []):
                    continue
            for walk in self._cycles_in_component(component, forward):
                key = frozenset(walk)
                if key in seen_sets:
                    continue
                seen_sets.add(key)
                found.append(walk)

        found.sort()
        return found

    def resolve_transitive(self, graph: DependencyGraph, root: str) -> TransitiveDeps:
        """BFS over embed and dependency edges starting at root."""
        result = TransitiveDeps(root=root)
        forward = self._forward_index(graph.edges)
        if root not in forward:
            return result

        result.direct = set(forward[root])

        visited = {root}
        queue = deque([root])
        while queue:
            current = queue.popleft()
            for neighbor in forward.get(current, []):
                if neighbor not in visited:
                    visited.add(neighbor)
                    result.all_transitive.add(neighbor)
                    queue.append(neighbor)

        result.all_transitive.discard(root)
        return result

    @staticmethod
    def _collect_edges(declarations: list[LibraryDeclaration]) -> list[DependencyEdge]:
        edges: set[DependencyEdge] = set()
        for decl in declarations:
            for target in decl.embeds:
                edges.add(DependencyEdge(decl.category, target, EdgeKind.EMBED))
            for target in decl.dependencies:
                edges.add(DependencyEdge(decl.category, target, EdgeKind.DEPENDENCY))
        return sorted(edges, key=lambda e: e.sort_key)

    @staticmethod
    def _forward_index(edges: Iterable[DependencyEdge]) -> dict[str, list[str]]:
        forward: dict[str, set[str]] = {}
        for edge in edges:
            forward.setdefault(edge.source, set()).add(edge.target)
            forward.setdefault(edge.target, set())
        return {node: sorted(targets) for node, targets in sorted(forward.items())}

    @staticmethod
    def _strongly_connected(forward: dict[str, list[str]]) -> list[set[str]]:
        """Tarjan's algorithm driven by an explicit stack."""
        index: dict[str, int] = {}
        lowlink: dict[str, int] = {}
        on_stack: set[str] = set()
        stack: list[str] = []
        components: list[set[str]] = []
        counter = 0

        for root in forward:
            if root in index:
                continue
            work: list[tuple[str, int]] = [(root, 0)]
            while work:
                node, child_pos = work.pop()
                if child_pos == 0:
                    index[node] = lowlink[node] = counter
                    counter += 1
                    stack.append(node)
                    on_stack.add(node)

                children = forward.get(node, [])
                descended = False
                for pos in range(child_pos, len(children)):
                    child = children[pos]
                    if child not in index:
                        work.append((node, pos + 1))
                        work.append((child, 0))
                        descended = True
                        break
                    if child in on_stack:
                        lowlink[node] = min(lowlink[node], index[child])
                if descended:
                    continue

                if lowlink[node] == index[node]:
                    component: set[str] = set()
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        component.add(member)
                        if member == node:
                            break
                    components.append(component)

                if work:
                    parent = work[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[node])

        return components

    @staticmethod
    def _cycles_in_component(
        component: set[str],
        forward: dict[str, list[str]],
    ) -> list[tuple[str, ...]]:
        """Enumerate elementary cycles, each rooted at its smallest member."""
        walks: list[tuple[str, ...]] = []

        for start in sorted(component):
            allowed = {n for n in component if n >= start}
            path = [start]
            on_path = {start}
            stack = [iter(forward.get(start, []))]

            while stack:
                nxt = next(stack[-1], None)
                if nxt is None:
                    stack.pop()
                    on_path.discard(path.pop())
                    continue
                if nxt == start:
                    walks.append(tuple(path) + (start,))
                elif nxt in allowed and nxt not in on_path:
                    path.append(nxt)
                    on_path.add(nxt)
                    stack.append(iter(forward.get(nxt, [])))

        return walks
