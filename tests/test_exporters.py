"""Tests for the report writer, page correlation and the reduced manifest proposal."""

import json
from pathlib import Path

import pytest

from clientlib_analyzer.analysis import DependencyGraphBuilder
from clientlib_analyzer.analysis.correlation import (
    correlate_findings,
    load_snapshot,
    snapshot_from_dict,
)
from clientlib_analyzer.analysis.optimizer import (
    embeds_used_by,
    propose_reduced_manifest,
    render_clientlib_xml,
)
from clientlib_analyzer.collector import ManifestCollector
from clientlib_analyzer.exporter import generate_summary, write_manifest, write_report
from clientlib_analyzer.models import (
    AssetSet,
    LibraryDeclaration,
    PageUsageSnapshot,
    ScanConfig,
)
from clientlib_analyzer.pipeline import run_analysis

FIXTURES = Path(__file__).parent / "fixtures"
REPO = FIXTURES / "repo"


@pytest.fixture(scope="module")
def result():
    return run_analysis(ScanConfig(root=REPO))


def _declaration(result, category):
    return next(d for d in result.declarations if d.category == category)


# ── Report ────────────────────────────────────────────────────

class TestReport:
    def test_write_report_files(self, result, tmp_path):
        files = write_report(result, tmp_path / "out")
        assert [f.name for f in files] == ["data.json", "summary.md"]
        assert all(f.exists() for f in files)

    def test_data_json(self, result, tmp_path):
        write_report(result, tmp_path)
        data = json.loads((tmp_path / "data.json").read_text())
        assert data["graph"]["unused"] == ["acme.unused"]
        assert data["graph"]["circular"] == [["acme.loop.a", "acme.loop.b", "acme.loop.a"]]
        assert {"from": "acme.site", "to": "acme.base", "kind": "dependency"} in data["graph"]["edges"]
        assert "generated" in data
        assert "correlated" not in data

    def test_summary_sections(self, result):
        summary = generate_summary(result)
        assert summary.startswith("# Client Library Analysis")
        for heading in ("## Declarations", "## Duplicates", "## Unused", "## Circular dependencies", "## Skipped files"):
            assert heading in summary
        assert "- acme.unused" in summary
        assert "- acme.loop.a -> acme.loop.b -> acme.loop.a" in summary
        assert "**acme.base**" in summary
        assert "## Page correlation" not in summary

    def test_summary_uses_relative_paths(self, result):
        summary = generate_summary(result)
        assert "ui.frontend " in summary
        assert str(REPO.resolve()) + "/ui.frontend" not in summary

    def test_report_with_correlation(self, result, tmp_path):
        snapshot = PageUsageSnapshot(path="/content/acme/en", components=["acme/components/site"])
        correlated = correlate_findings(snapshot, result.declarations)
        write_report(result, tmp_path, correlated)
        data = json.loads((tmp_path / "data.json").read_text())
        assert data["correlated"]["component_to_categories"] == {"acme/components/site": ["acme.site"]}
        assert "## Page correlation" in (tmp_path / "summary.md").read_text()


# ── Correlation ───────────────────────────────────────────────

class TestCorrelation:
    def test_matches_by_last_segment(self, result):
        snapshot = PageUsageSnapshot(
            path="/content/acme/en",
            components=["acme/components/loop", "acme/components/hero", "acme/components/Base/"],
        )
        findings = correlate_findings(snapshot, result.declarations)
        assert findings.component_to_categories["acme/components/loop"] == ["acme.loop.a", "acme.loop.b"]
        assert findings.component_to_categories["acme/components/Base/"] == ["acme.base"]
        assert findings.missing_categories == ["acme/components/hero"]
        assert findings.matched_categories == ["acme.base", "acme.loop.a", "acme.loop.b"]

    def test_empty_snapshot(self, result):
        findings = correlate_findings(PageUsageSnapshot(path="/content/empty"), result.declarations)
        assert findings.component_to_categories == {}
        assert findings.missing_categories == []

    def test_snapshot_from_dict_aliases(self):
        snapshot = snapshot_from_dict({"path": "/p", "template": "/t", "componentsUsed": ["a/b"]})
        assert snapshot.components == ["a/b"]
        assert snapshot.template == "/t"

    def test_snapshot_requires_path(self):
        with pytest.raises(ValueError):
            snapshot_from_dict({"components": []})

    def test_load_snapshot(self, tmp_path):
        path = tmp_path / "page.json"
        path.write_text(json.dumps({"path": "/content/x", "components": ["acme/components/grid"]}))
        assert load_snapshot(path).components == ["acme/components/grid"]

    def test_load_snapshot_rejects_arrays(self, tmp_path):
        path = tmp_path / "page.json"
        path.write_text("[]")
        with pytest.raises(ValueError):
            load_snapshot(path)


# ── Reduced manifest ──────────────────────────────────────────

class TestOptimizer:
    def test_embeds_used_by(self, result):
        snapshot = PageUsageSnapshot(path="/p", components=["core/wcm/components/image/v3/image"])
        assert embeds_used_by(_declaration(result, "acme.base"), snapshot) == ["core.wcm.components.image.v3"]

    def test_propose_keeps_only_used_embeds(self, result):
        base = _declaration(result, "acme.base")
        reduced = propose_reduced_manifest(base, result.graph, keep=["core.wcm.components.image.v3"])
        assert reduced.category == "acme.base.reduced"
        assert reduced.kept_embeds == ["core.wcm.components.image.v3"]
        assert reduced.removed_embeds == ["acme.grid"]
        assert reduced.dependencies == ["granite.jquery"]
        assert reduced.reduction == 50
        assert reduced.allow_proxy is True

    def test_custom_name(self, result):
        reduced = propose_reduced_manifest(_declaration(result, "acme.grid"), result.graph, keep=[], category="acme.lean")
        assert reduced.category == "acme.lean"
        assert reduced.reduction == 0

    def test_embed_looping_back_is_dropped(self, result):
        loop_a = _declaration(result, "acme.loop.a")
        reduced = propose_reduced_manifest(loop_a, result.graph, keep=["acme.loop.b"])
        assert reduced.kept_embeds == []
        assert reduced.removed_embeds == ["acme.loop.b"]
        assert reduced.reduction == 100

    def test_render_xml(self):
        xml = render_clientlib_xml("x.lean", ["a", "b"], ["dep"], allow_proxy=False)
        assert 'jcr:primaryType="cq:ClientLibraryFolder"' in xml
        assert 'categories="[x.lean]"' in xml
        assert 'embed="[a,b]"' in xml
        assert 'dependencies="[dep]"' in xml
        assert 'allowProxy="{Boolean}false"' in xml
        assert xml.rstrip().endswith("/>")

    def test_render_xml_without_lists(self):
        xml = render_clientlib_xml("x.empty", [])
        assert "embed=" not in xml
        assert "dependencies=" not in xml


class TestManifestWriter:
    def test_folder_layout(self, tmp_path):
        declaration = LibraryDeclaration(
            category="acme.base",
            source_path=Path("/repo/clientlib-base"),
            embeds=["a.one", "a.two"],
            assets=AssetSet(css=["css/base.css"], js=["js/base.js"]),
        )
        graph = DependencyGraphBuilder().build([declaration], [])
        reduced = propose_reduced_manifest(declaration, graph, keep=["a.one"])

        folder = write_manifest(reduced, declaration, tmp_path)
        assert folder == tmp_path / "clientlib-acme-base-reduced"
        assert sorted(p.name for p in folder.iterdir()) == [".content.xml", "css.txt", "js.txt"]
        assert "css/base.css" in (folder / "css.txt").read_text()
        assert "js/base.js" in (folder / "js.txt").read_text()

    def test_written_manifest_parses_back(self, tmp_path):
        declaration = LibraryDeclaration(
            category="acme.page",
            source_path=Path("/repo/clientlib-page"),
            embeds=["a.one", "a.two"],
            dependencies=["granite.jquery"],
        )
        graph = DependencyGraphBuilder().build([declaration], [])
        reduced = propose_reduced_manifest(declaration, graph, keep=["a.two"])
        folder = write_manifest(reduced, declaration, tmp_path)

        parsed = ManifestCollector().collect_file(folder / ".content.xml")
        assert parsed.category == "acme.page.reduced"
        assert parsed.embeds == ["a.two"]
        assert parsed.dependencies == ["granite.jquery"]
        assert parsed.flags["allowProxy"] is True
