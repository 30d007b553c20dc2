"""Write data.json and summary.md for an analysis run."""

from __future__ import annotations

import json
from collections import Counter
from datetime import datetime
from pathlib import Path

from clientlib_analyzer.analysis.correlation import CorrelatedFindings
from clientlib_analyzer.models import AnalysisResult


def _relative(path: str | Path, root: Path) -> str:
    try:
        return Path(path).relative_to(root).as_posix() or "."
    except ValueError:
        return str(path)


def generate_summary(result: AnalysisResult, correlated: CorrelatedFindings | None = None) -> str:
    """Render the human-readable markdown summary."""
    graph = result.graph
    root = result.root
    lines = [
        "# Client Library Analysis",
        "",
        f"- Repository: `{root}`",
        f"- Files scanned: {result.files_scanned}",
        f"- Declarations: {len(result.declarations)}",
        f"- References: {len(result.references)}",
        f"- Categories: {len(graph.nodes)}",
        f"- Edges: {len(graph.edges)}",
        f"- Skipped files: {len(result.diagnostics)}",
        "",
        "## Declarations",
        "",
    ]
    if result.declarations:
        lines.append("| Category | Path | Embeds | Dependencies | CSS | JS |")
        lines.append("|----------|------|--------|--------------|-----|----|")
        for decl in sorted(result.declarations, key=lambda d: (d.category, str(d.source_path))):
            lines.append(
                f"| {decl.category} | {_relative(decl.source_path, root)} "
                f"| {len(decl.embeds)} | {len(decl.dependencies)} "
                f"| {len(decl.assets.css)} | {len(decl.assets.js)} |"
            )
    else:
        lines.append("No client library declarations found.")

    lines += ["", "## References by kind", ""]
    kinds = Counter(ref.kind.value for ref in result.references)
    if kinds:
        for kind, count in sorted(kinds.items()):
            lines.append(f"- {kind}: {count}")
    else:
        lines.append("No references found.")

    lines += ["", "## Duplicates", ""]
    if graph.duplicates:
        for dup in graph.duplicates:
            paths = ", ".join(f"`{_relative(p, root)}`" for p in dup.paths)
            lines.append(f"- **{dup.category}**: {paths}")
    else:
        lines.append("None.")

    lines += ["", "## Unused", ""]
    if graph.unused:
        lines.extend(f"- {category}" for category in graph.unused)
    else:
        lines.append("None.")

    lines += ["", "## Circular dependencies", ""]
    if graph.circular:
        lines.extend("- " + " -> ".join(cycle) for cycle in graph.circular)
    else:
        lines.append("None.")

    if correlated is not None:
        lines += ["", "## Page correlation", ""]
        for component, categories in correlated.component_to_categories.items():
            lines.append(f"- `{component}`: {', '.join(categories) or 'no category'}")
        if correlated.missing_categories:
            lines += ["", f"{len(correlated.missing_categories)} component(s) without a category."]

    if result.diagnostics:
        lines += ["", "## Skipped files", ""]
        for diag in result.diagnostics:
            lines.append(f"- `{_relative(diag.file, root)}`: {diag.message}")

    lines += ["", f"Generated on: {datetime.now().isoformat()}", ""]
    return "\n".join(lines)


def write_report(
    result: AnalysisResult,
    output_dir: Path,
    correlated: CorrelatedFindings | None = None,
) -> list[Path]:
    """Write data.json and summary.md into output_dir; returns the files written."""
    output_dir.mkdir(parents=True, exist_ok=True)

    data = result.to_dict()
    data["generated"] = datetime.now().isoformat()
    if correlated is not None:
        data["correlated"] = correlated.to_dict()

    data_path = output_dir / "data.json"
    data_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    summary_path = output_dir / "summary.md"
    summary_path.write_text(generate_summary(result, correlated), encoding="utf-8")

    return [data_path, summary_path]
