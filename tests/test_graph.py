"""Tests for the dependency graph builder."""

from pathlib import Path

from clientlib_analyzer.analysis import DependencyGraphBuilder, EdgeKind
from clientlib_analyzer.models import LibraryDeclaration, ReferenceKind, UsageReference


def _decl(category, path=None, embeds=(), dependencies=(), aliases=()):
    return LibraryDeclaration(
        category=category,
        aliases=list(aliases),
        source_path=Path(path or f"/repo/clientlib-{category}"),
        embeds=list(embeds),
        dependencies=list(dependencies),
    )


def _ref(category, kind=ReferenceKind.STYLE_INCLUSION):
    return UsageReference(category=category, file=Path("/repo/page.html"), kind=kind, line=1)


def _build(declarations, references=()):
    return DependencyGraphBuilder().build(declarations, references)


class TestBuild:
    def test_empty_input(self):
        graph = _build([])
        assert graph.nodes == ()
        assert graph.edges == ()
        assert graph.duplicates == ()
        assert graph.unused == ()
        assert graph.circular == ()

    def test_edges_for_embeds_and_dependencies(self):
        graph = _build([_decl("a", embeds=["b"], dependencies=["c"])])
        assert [(e.source, e.target, e.kind) for e in graph.edges] == [
            ("a", "b", EdgeKind.EMBED),
            ("a", "c", EdgeKind.DEPENDENCY),
        ]
        assert graph.nodes == ("a", "b", "c")

    def test_same_target_as_embed_and_dependency(self):
        graph = _build([_decl("a", embeds=["b"], dependencies=["b"])])
        assert len(graph.edges) == 2
        assert {e.kind for e in graph.edges} == {EdgeKind.EMBED, EdgeKind.DEPENDENCY}

    def test_identical_edges_collapse(self):
        graph = _build([
            _decl("a", path="/repo/one", embeds=["b"]),
            _decl("a", path="/repo/two", embeds=["b"]),
        ])
        assert len(graph.edges) == 1

    def test_referenced_only_category_is_node(self):
        graph = _build([], [_ref("ghost")])
        assert graph.nodes == ("ghost",)
        assert graph.unused == ()

    def test_idempotent(self):
        decls = [_decl("a", embeds=["b"]), _decl("b", dependencies=["a"]), _decl("c")]
        refs = [_ref("a")]
        assert _build(decls, refs) == _build(decls, refs)

    def test_to_dict_edge_keys(self):
        data = _build([_decl("a", embeds=["b"])]).to_dict()
        assert data["edges"] == [{"from": "a", "to": "b", "kind": "embed"}]
        assert data["circular"] == []


class TestDuplicates:
    def test_two_paths(self):
        graph = _build([
            _decl("x", path="/repo/one"),
            _decl("x", path="/repo/two"),
            _decl("y", path="/repo/three"),
        ])
        assert len(graph.duplicates) == 1
        dup = graph.duplicates[0]
        assert dup.category == "x"
        assert dup.paths == ("/repo/one", "/repo/two")

    def test_same_path_twice_is_not_a_duplicate(self):
        graph = _build([_decl("x", path="/repo/one"), _decl("x", path="/repo/one")])
        assert graph.duplicates == ()


class TestUnused:
    def test_declared_never_referenced(self):
        graph = _build([_decl("orphan")])
        assert graph.unused == ("orphan",)

    def test_style_inclusion_counts_as_use(self):
        graph = _build([_decl("orphan")], [_ref("orphan")])
        assert graph.unused == ()

    def test_any_reference_kind_counts(self):
        graph = _build([_decl("lazy")], [_ref("lazy", ReferenceKind.JS_FUNCTION_CALL)])
        assert graph.unused == ()

    def test_edge_target_is_not_unused(self):
        graph = _build([_decl("page", embeds=["part"]), _decl("part")], [_ref("page")])
        assert graph.unused == ()

    def test_edge_source_alone_is_unused(self):
        graph = _build([_decl("page", embeds=["part"]), _decl("part")])
        assert graph.unused == ("page",)

    def test_undeclared_targets_never_unused(self):
        graph = _build([_decl("a", dependencies=["external.lib"])], [_ref("a")])
        assert "external.lib" in graph.nodes
        assert graph.unused == ()


class TestCycles:
    def test_two_cycle(self):
        graph = _build([_decl("a", embeds=["b"]), _decl("b", embeds=["a"])])
        assert graph.circular == (("a", "b", "a"),)

    def test_self_cycle(self):
        graph = _build([_decl("c", dependencies=["c"])])
        assert graph.circular == (("c", "c"),)

    def test_mixed_edge_kinds(self):
        graph = _build([_decl("a", embeds=["b"]), _decl("b", dependencies=["a"])])
        assert graph.circular == (("a", "b", "a"),)

    def test_acyclic(self):
        graph = _build([
            _decl("a", embeds=["b", "c"]),
            _decl("b", embeds=["d"]),
            _decl("c", embeds=["d"]),
        ])
        assert graph.circular == ()

    def test_cycle_starts_at_smallest_category(self):
        graph = _build([_decl("z", embeds=["m"]), _decl("m", embeds=["q"]), _decl("q", embeds=["z"])])
        assert graph.circular == (("m", "q", "z", "m"),)

    def test_every_distinct_cycle_found(self):
        # a -> b -> c -> a plus the chord a -> c gives two cycles
        graph = _build([
            _decl("a", embeds=["b", "c"]),
            _decl("b", embeds=["c"]),
            _decl("c", embeds=["a"]),
        ])
        assert graph.circular == (("a", "b", "c", "a"), ("a", "c", "a"))

    def test_disjoint_cycles(self):
        graph = _build([
            _decl("a", embeds=["b"]), _decl("b", embeds=["a"]),
            _decl("x", embeds=["y"]), _decl("y", embeds=["x"]),
        ])
        assert graph.circular == (("a", "b", "a"), ("x", "y", "x"))

    def test_long_chain_does_not_recurse(self):
        n = 1500
        decls = [_decl(f"n{i:05d}", embeds=[f"n{i + 1:05d}"]) for i in range(n)]
        decls.append(_decl(f"n{n:05d}", embeds=["n00000"]))
        graph = _build(decls)
        assert len(graph.circular) == 1
        assert len(graph.circular[0]) == n + 2


class TestResolveTransitive:
    def test_follows_both_edge_kinds(self):
        builder = DependencyGraphBuilder()
        graph = builder.build([
            _decl("a", embeds=["b"]),
            _decl("b", dependencies=["c"]),
            _decl("c"),
        ], [])
        deps = builder.resolve_transitive(graph, "a")
        assert deps.direct == {"b"}
        assert deps.all_transitive == {"b", "c"}

    def test_cycle_excludes_root(self):
        builder = DependencyGraphBuilder()
        graph = builder.build([_decl("a", embeds=["b"]), _decl("b", embeds=["a"])], [])
        assert builder.resolve_transitive(graph, "a").all_transitive == {"b"}

    def test_unknown_root(self):
        builder = DependencyGraphBuilder()
        graph = builder.build([_decl("a")], [])
        deps = builder.resolve_transitive(graph, "missing")
        assert deps.direct == set()
        assert deps.all_transitive == set()


class TestMultiCategoryFolders:
    def _shared(self):
        return [
            _decl("acme.a", path="/repo/clientlib-a", aliases=["acme.shared"]),
            _decl("acme.b", path="/repo/clientlib-b", aliases=["acme.shared"]),
        ]

    def test_aliases_are_nodes(self):
        graph = _build(self._shared())
        assert graph.nodes == ("acme.a", "acme.b", "acme.shared")

    def test_alias_declared_twice_is_duplicate(self):
        graph = _build(self._shared())
        (dup,) = graph.duplicates
        assert dup.category == "acme.shared"
        assert dup.paths == ("/repo/clientlib-a", "/repo/clientlib-b")

    def test_folder_used_through_alias(self):
        graph = _build(self._shared(), [_ref("acme.shared")])
        assert graph.unused == ()

    def test_folder_targeted_through_alias(self):
        graph = _build([
            _decl("acme.page", embeds=["acme.extra"]),
            _decl("acme.part", aliases=["acme.extra"]),
        ], [_ref("acme.page")])
        assert graph.unused == ()

    def test_unused_folder_lists_every_category(self):
        graph = _build([_decl("acme.a", aliases=["acme.shared"])])
        assert graph.unused == ("acme.a", "acme.shared")

    def test_edges_start_at_first_category(self):
        graph = _build([_decl("acme.a", aliases=["acme.shared"], embeds=["acme.x"])])
        assert [(e.source, e.target) for e in graph.edges] == [("acme.a", "acme.x")]


def test_successors_and_predecessors():
    graph = _build([
        _decl("a", embeds=["b"], dependencies=["b", "c"]),
        _decl("d", embeds=["b"]),
    ])
    assert graph.successors("a") == ["b", "c"]
    assert graph.predecessors("b") == ["a", "d"]
    assert graph.successors("b") == []
