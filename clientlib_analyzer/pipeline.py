"""Analysis orchestrator: enumerate -> collect / scan (in parallel) -> merge -> build graph."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from clientlib_analyzer.analysis.dependency_graph import DependencyGraphBuilder
from clientlib_analyzer.collector import collect_declaration
from clientlib_analyzer.discovery import CandidateFile, FileRole, iter_candidate_files
from clientlib_analyzer.errors import FileSkipped, RepositoryRootError
from clientlib_analyzer.models import (
    AnalysisResult,
    Diagnostic,
    LibraryDeclaration,
    ScanConfig,
    UsageReference,
)
from clientlib_analyzer.references import scan_references

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


@dataclass
class FileOutcome:
    """What one file contributed; owned by the worker that produced it."""
    declaration: LibraryDeclaration | None = None
    references: list[UsageReference] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def process_file(candidate: CandidateFile, skip_dirs: list[str] | None = None) -> FileOutcome:
    """Collect a declaration or scan for references; never raises for a bad file."""
    outcome = FileOutcome()
    try:
        if candidate.has(FileRole.MANIFEST) or candidate.has(FileRole.CONFIG):
            outcome.declaration = collect_declaration(candidate.path, candidate.roles, skip_dirs)
            if outcome.declaration is not None:
                return outcome
        outcome.references = scan_references(candidate.path, candidate.roles)
    except FileSkipped as e:
        logger.warning("Skipping %s", e)
        outcome.diagnostics.append(Diagnostic(file=candidate.path, message=e.reason))
    return outcome


def _check_root(root: Path) -> Path:
    if not root.exists():
        raise RepositoryRootError(root, "does not exist")
    if not root.is_dir():
        raise RepositoryRootError(root, "is not a directory")
    if not os.access(root, os.R_OK | os.X_OK):
        raise RepositoryRootError(root, "is not readable")
    try:
        with os.scandir(root) as entries:
            next(entries, None)
    except OSError as e:
        raise RepositoryRootError(root, e.strerror or str(e)) from e
    return root.resolve()


def analyze_files(
    candidates: list[CandidateFile],
    skip_dirs: list[str] | None = None,
    max_workers: int | None = None,
    progress: ProgressCallback | None = None,
) -> list[FileOutcome]:
    """Process candidates on a thread pool; outcomes come back in input order."""
    total = len(candidates)
    if progress:
        progress("Scanning", 0, total)

    outcomes: list[FileOutcome] = []
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        for i, outcome in enumerate(pool.map(lambda c: process_file(c, skip_dirs), candidates), 1):
            outcomes.append(outcome)
            if progress:
                progress("Scanning", i, total)
    return outcomes


def run_analysis(config: ScanConfig, progress: ProgressCallback | None = None) -> AnalysisResult:
    """Run the full analysis over config.root.

    Raises RepositoryRootError when the root cannot be scanned; single bad
    files only add diagnostics.
    """
    root = _check_root(Path(config.root))

    # Stage 1: Enumerate
    candidates = list(iter_candidate_files(root, config.rules, config.skip_dirs))
    logger.info("Found %d candidate file(s) under %s", len(candidates), root)

    # Stage 2: Collect and scan
    outcomes = analyze_files(
        candidates,
        skip_dirs=config.skip_dirs,
        max_workers=config.max_workers,
        progress=progress,
    )

    # Stage 3: Merge
    declarations: list[LibraryDeclaration] = []
    references: list[UsageReference] = []
    diagnostics: list[Diagnostic] = []
    for outcome in outcomes:
        if outcome.declaration is not None:
            declarations.append(outcome.declaration)
        references.extend(outcome.references)
        diagnostics.extend(outcome.diagnostics)

    # Stage 4: Graph
    if progress:
        progress("Building graph", 0, 1)
    graph = DependencyGraphBuilder().build(declarations, references)
    if progress:
        progress("Building graph", 1, 1)

    logger.info(
        "%d declaration(s), %d reference(s), %d skipped file(s)",
        len(declarations), len(references), len(diagnostics),
    )
    return AnalysisResult(
        root=root,
        declarations=declarations,
        references=references,
        graph=graph,
        diagnostics=diagnostics,
        files_scanned=len(candidates),
    )
