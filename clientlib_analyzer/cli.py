"""Click CLI with scan, report, optimize, and serve subcommands."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from clientlib_analyzer import __version__
from clientlib_analyzer.analysis.correlation import correlate_findings, load_snapshot
from clientlib_analyzer.analysis.optimizer import embeds_used_by, propose_reduced_manifest
from clientlib_analyzer.errors import RepositoryRootError
from clientlib_analyzer.exporter import write_manifest, write_report
from clientlib_analyzer.models import (
    DEFAULT_SKIP_DIRS,
    AnalysisResult,
    PageUsageSnapshot,
    ReferenceKind,
    ScanConfig,
    ScanRules,
)
from clientlib_analyzer.pipeline import run_analysis

_KIND_COLORS = {
    ReferenceKind.STYLE_INCLUSION: "cyan",
    ReferenceKind.SCRIPT_INCLUSION: "yellow",
    ReferenceKind.COMBINED_INCLUSION: "green",
    ReferenceKind.POLICY_ARRAY: "magenta",
    ReferenceKind.POLICY_SCALAR: "magenta",
    ReferenceKind.POLICY_ATTRIBUTE: "magenta",
    ReferenceKind.COMPONENT_CONFIG: "blue",
    ReferenceKind.COMPONENT_CONFIG_SCALAR: "blue",
    ReferenceKind.CATEGORIES_ATTRIBUTE: "bright_blue",
    ReferenceKind.CATEGORY_KEY: "bright_blue",
    ReferenceKind.JS_FUNCTION_CALL: "bright_yellow",
}


_SCAN_OPTIONS = [
    click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path), default="."),
    click.option("--manifest-pattern", multiple=True, help="Glob for manifest files (repeatable)"),
    click.option("--config-pattern", multiple=True, help="Glob for build-tool config files (repeatable)"),
    click.option("--template-pattern", multiple=True, help="Glob for template files (repeatable)"),
    click.option("--source-pattern", multiple=True, help="Glob for other source files (repeatable)"),
    click.option("--skip-dir", multiple=True, help="Directory name pattern to skip (repeatable)"),
    click.option("--workers", "-w", type=click.IntRange(min=1), default=None, help="Worker threads"),
]


def scan_options(func):
    """Options shared by every command that scans a repository."""
    for option in reversed(_SCAN_OPTIONS):
        func = option(func)
    return func


def _build_config(
    root: Path,
    manifest_pattern: tuple[str, ...],
    config_pattern: tuple[str, ...],
    template_pattern: tuple[str, ...],
    source_pattern: tuple[str, ...],
    skip_dir: tuple[str, ...],
    workers: int | None,
) -> ScanConfig:
    defaults = ScanRules()
    rules = ScanRules(
        manifest_patterns=manifest_pattern or defaults.manifest_patterns,
        config_patterns=config_pattern or defaults.config_patterns,
        template_patterns=template_pattern or defaults.template_patterns,
        source_patterns=source_pattern or defaults.source_patterns,
    )
    config = ScanConfig(root=root, rules=rules, skip_dirs=list(skip_dir or DEFAULT_SKIP_DIRS))
    if workers:
        config.max_workers = workers
    return config


def _display_path(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix() or "."
    except ValueError:
        return str(path)


def _analyze(config: ScanConfig) -> AnalysisResult:
    try:
        return run_analysis(config)
    except RepositoryRootError as e:
        raise click.ClickException(str(e))


def _load_snapshot(path: Path | None) -> PageUsageSnapshot | None:
    if path is None:
        return None
    try:
        return load_snapshot(path)
    except (ValueError, OSError) as e:
        raise click.ClickException(f"Cannot read page snapshot {path}: {e}")


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", count=True, help="Log progress (-vv for debug output)")
def cli(verbose: int):
    """clientlib-analyzer: find declared, used, duplicated and circular client libraries."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG if verbose > 1 else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )


@cli.command()
@scan_options
@click.option("--show-references", is_flag=True, help="List every usage reference")
def scan(root: Path, show_references: bool, **options):
    """Scan a repository and print a summary."""
    result = _analyze(_build_config(root, **options))
    graph = result.graph

    if not result.declarations and not result.references:
        click.echo("No client library declarations or references found.")
        return

    click.echo(f"\nFound {len(result.declarations)} declaration(s) in {result.files_scanned} file(s):\n")
    for decl in result.declarations:
        marker = click.style("unused", fg="red") if decl.category in graph.unused else ""
        click.echo(
            f"  {click.style(decl.category, fg='cyan')}  "
            f"{click.style(decl.kind, dim=True)}  "
            f"{_display_path(decl.source_path, result.root)}  "
            f"{marker}"
        )
        if decl.embeds:
            click.echo(f"      embed: {', '.join(decl.embeds)}")
        if decl.dependencies:
            click.echo(f"      dependencies: {', '.join(decl.dependencies)}")

    if show_references and result.references:
        click.echo(f"\nReferences ({len(result.references)}):\n")
        for ref in result.references:
            color = _KIND_COLORS[ref.kind]
            click.echo(
                f"  {click.style(ref.kind.value, fg=color):>30}  {ref.category}  "
                f"{click.style(f'{ref.file}:{ref.line}', dim=True)}"
            )

    if graph.duplicates:
        click.echo(click.style("\nDuplicates:", fg="yellow"))
        for dup in graph.duplicates:
            click.echo(f"  {dup.category}")
            for path in dup.paths:
                click.echo(f"    {path}")

    if graph.circular:
        click.echo(click.style("\nCircular dependencies:", fg="red"))
        for cycle in graph.circular:
            click.echo("  " + " -> ".join(cycle))

    if result.diagnostics:
        click.echo(click.style(f"\nSkipped {len(result.diagnostics)} file(s):", fg="yellow"))
        for diag in result.diagnostics:
            click.echo(f"  {diag.file}: {diag.message}")

    click.echo("\nSummary:")
    click.echo(f"  categories: {len(graph.nodes)}")
    click.echo(f"  edges: {len(graph.edges)}")
    click.echo(f"  references: {len(result.references)}")
    click.echo(f"  duplicates: {len(graph.duplicates)}")
    click.echo(f"  unused: {len(graph.unused)}")
    click.echo(f"  cycles: {len(graph.circular)}")


@cli.command()
@scan_options
@click.option("-o", "--output", "output_dir", type=click.Path(file_okay=False, path_type=Path), default="report", help="Output directory")
@click.option("--snapshot", "snapshot_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Page usage snapshot (JSON)")
def report(root: Path, output_dir: Path, snapshot_path: Path | None, **options):
    """Write data.json and summary.md for a repository."""
    snapshot = _load_snapshot(snapshot_path)
    result = _analyze(_build_config(root, **options))
    correlated = correlate_findings(snapshot, result.declarations) if snapshot else None

    files = write_report(result, output_dir, correlated)
    click.echo(f"Done! Wrote {len(files)} file(s) to {output_dir}")
    for f in files:
        click.echo(f"  {f}")


@cli.command()
@scan_options
@click.argument("category")
@click.option("--snapshot", "snapshot_path", required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Page usage snapshot (JSON)")
@click.option("-o", "--output", "output_dir", type=click.Path(file_okay=False, path_type=Path), default="optimized", help="Output directory")
@click.option("--name", help="Category of the proposed library (default: <category>.reduced)")
def optimize(
    root: Path,
    category: str,
    snapshot_path: Path,
    output_dir: Path,
    name: str | None,
    **options,
):
    """Propose a reduced manifest for CATEGORY from a page snapshot."""
    snapshot = _load_snapshot(snapshot_path)
    result = _analyze(_build_config(root, **options))

    matches = [d for d in result.declarations if d.category == category]
    if not matches:
        raise click.ClickException(f"Category {category!r} is not declared under {result.root}")
    declaration = matches[0]

    reduced = propose_reduced_manifest(
        declaration,
        result.graph,
        keep=embeds_used_by(declaration, snapshot),
        category=name,
    )
    folder = write_manifest(reduced, declaration, output_dir)
    (output_dir / "reduction.json").write_text(json.dumps(reduced.to_dict(), indent=2) + "\n", encoding="utf-8")

    click.echo(f"{declaration.category} -> {reduced.category}: {reduced.reduction}% fewer embeds")
    for embed in reduced.kept_embeds:
        click.echo(f"  {click.style('keep', fg='green')}    {embed}")
    for embed in reduced.removed_embeds:
        click.echo(f"  {click.style('remove', fg='red')}  {embed}")
    click.echo(f"\nWrote {folder}")


@cli.command()
@click.option("--port", "-p", default=8421, help="Port number")
@click.option("--host", default="127.0.0.1", help="Host address")
def serve(port: int, host: str):
    """Start the JSON API."""
    try:
        import uvicorn
    except ImportError:
        raise click.ClickException(
            "uvicorn is required for the API server. "
            "Install with: pip install 'clientlib-analyzer[web]'"
        )

    from clientlib_analyzer.web import create_app

    click.echo(f"Starting clientlib-analyzer API at http://{host}:{port}")
    uvicorn.run(create_app(), host=host, port=port, log_level="info")


def main():
    cli()


if __name__ == "__main__":
    main()
