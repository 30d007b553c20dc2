"""FastAPI routes for scanning repositories and reading the results."""

from __future__ import annotations

import asyncio
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from clientlib_analyzer.analysis.correlation import correlate_findings
from clientlib_analyzer.analysis.dependency_graph import DependencyGraphBuilder
from clientlib_analyzer.errors import RepositoryRootError
from clientlib_analyzer.models import PageUsageSnapshot, ScanConfig, ScanRules
from clientlib_analyzer.pipeline import run_analysis
from clientlib_analyzer.web.state import AppState, ScanSession

router = APIRouter(prefix="/api")
_builder = DependencyGraphBuilder()


# --- Request models ---

class ScanRequest(BaseModel):
    path: str
    manifest_patterns: list[str] | None = None
    config_patterns: list[str] | None = None
    template_patterns: list[str] | None = None
    source_patterns: list[str] | None = None
    skip_dirs: list[str] | None = None


class SnapshotRequest(BaseModel):
    path: str
    template: str | None = None
    components: list[str] = Field(default_factory=list)


# --- Helpers ---

def _state(request: Request) -> AppState:
    return request.app.state.scans


def _validate_path(request: Request, p: str) -> Path:
    """Ensure path exists and is under the allowed root."""
    resolved = Path(p).expanduser().resolve()
    if not resolved.exists():
        raise HTTPException(404, f"Path not found: {resolved}")
    allowed: Path = request.app.state.allowed_root
    if resolved != allowed and allowed not in resolved.parents:
        raise HTTPException(403, f"Path must be under {allowed}")
    return resolved


def _session(request: Request, scan_id: str) -> ScanSession:
    session = _state(request).get_scan(scan_id)
    if session is None:
        raise HTTPException(404, "Scan not found")
    return session


def _config(req: ScanRequest, root: Path) -> ScanConfig:
    defaults = ScanRules()
    rules = ScanRules(
        manifest_patterns=tuple(req.manifest_patterns or defaults.manifest_patterns),
        config_patterns=tuple(req.config_patterns or defaults.config_patterns),
        template_patterns=tuple(req.template_patterns or defaults.template_patterns),
        source_patterns=tuple(req.source_patterns or defaults.source_patterns),
    )
    config = ScanConfig(root=root, rules=rules)
    if req.skip_dirs is not None:
        config.skip_dirs = list(req.skip_dirs)
    return config


# --- Endpoints ---

@router.post("/scan")
async def scan_repository(req: ScanRequest, request: Request):
    root = _validate_path(request, req.path)
    if not root.is_dir():
        raise HTTPException(400, "Path must be a directory")

    try:
        result = await asyncio.to_thread(run_analysis, _config(req, root))
    except RepositoryRootError as e:
        raise HTTPException(400, str(e))

    session = ScanSession(result=result)
    _state(request).add_scan(session)
    return {
        "scan_id": session.id,
        "root": str(result.root),
        "files_scanned": result.files_scanned,
        "declarations": len(result.declarations),
        "references": len(result.references),
        "diagnostics": [d.to_dict() for d in result.diagnostics],
    }


@router.get("/scan/{scan_id}")
async def get_scan(scan_id: str, request: Request):
    session = _session(request, scan_id)
    data = session.result.to_dict()
    data["scan_id"] = session.id
    data["timestamp"] = session.timestamp
    return data


@router.get("/scan/{scan_id}/graph")
async def get_graph(scan_id: str, request: Request):
    return _session(request, scan_id).result.graph.to_dict()


@router.get("/scan/{scan_id}/deps/{category}")
async def get_deps(scan_id: str, category: str, request: Request):
    graph = _session(request, scan_id).result.graph
    if category not in graph.nodes:
        raise HTTPException(404, f"Unknown category: {category}")

    deps = _builder.resolve_transitive(graph, category)
    return {
        "category": category,
        "direct": graph.successors(category),
        "dependents": graph.predecessors(category),
        "all_transitive": sorted(deps.all_transitive),
    }


@router.get("/scan/{scan_id}/declarations")
async def get_declarations(scan_id: str, request: Request):
    result = _session(request, scan_id).result
    return [d.to_dict() for d in result.declarations]


@router.get("/scan/{scan_id}/references")
async def get_references(scan_id: str, request: Request, category: str | None = None):
    result = _session(request, scan_id).result
    refs = result.references
    if category:
        refs = [r for r in refs if r.category == category]
    return [r.to_dict() for r in refs]


@router.post("/scan/{scan_id}/correlate")
async def correlate(scan_id: str, snapshot: SnapshotRequest, request: Request):
    result = _session(request, scan_id).result
    findings = correlate_findings(
        PageUsageSnapshot(path=snapshot.path, template=snapshot.template, components=snapshot.components),
        result.declarations,
    )
    return findings.to_dict()


@router.delete("/scan/{scan_id}")
async def delete_scan(scan_id: str, request: Request):
    if not _state(request).delete_scan(scan_id):
        raise HTTPException(404, "Scan not found")
    return {"deleted": scan_id}
