"""Correlate a page usage snapshot with the declared categories."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from clientlib_analyzer.models import LibraryDeclaration, PageUsageSnapshot

logger = logging.getLogger(__name__)


@dataclass
class CorrelatedFindings:
    component_to_categories: dict[str, list[str]] = field(default_factory=dict)
    missing_categories: list[str] = field(default_factory=list)  # components with no category

    @property
    def matched_categories(self) -> list[str]:
        return sorted({c for cats in self.component_to_categories.values() for c in cats})

    def to_dict(self) -> dict[str, Any]:
        return {
            "component_to_categories": {k: list(v) for k, v in self.component_to_categories.items()},
            "missing_categories": list(self.missing_categories),
        }


def _component_name(component: str) -> str:
    return component.rstrip("/").rsplit("/", 1)[-1].lower()


def correlate_findings(
    snapshot: PageUsageSnapshot,
    declarations: Iterable[LibraryDeclaration],
) -> CorrelatedFindings:
    """Map each page component to the categories whose name contains its last path segment."""
    categories = sorted({decl.category for decl in declarations})
    findings = CorrelatedFindings()

    for component in snapshot.components:
        name = _component_name(component)
        matched = [c for c in categories if name and name in c.lower()]
        findings.component_to_categories[component] = matched
        if not matched:
            findings.missing_categories.append(component)

    logger.debug(
        "%s: %d component(s), %d without a category",
        snapshot.path, len(snapshot.components), len(findings.missing_categories),
    )
    return findings


def snapshot_from_dict(data: dict[str, Any]) -> PageUsageSnapshot:
    if "path" not in data:
        raise ValueError("page snapshot needs a 'path'")
    components = data.get("components") or data.get("componentsUsed") or []
    if not isinstance(components, list):
        raise ValueError("page snapshot 'components' must be a list")
    return PageUsageSnapshot(
        path=str(data["path"]),
        template=data.get("template"),
        components=[str(c) for c in components],
    )


def load_snapshot(path: Path) -> PageUsageSnapshot:
    """Load a snapshot saved as JSON: {"path": ..., "template": ..., "components": [...]}."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return snapshot_from_dict(data)
