"""Data models for the clientlib analysis pipeline."""

from __future__ import annotations

import enum
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from clientlib_analyzer.analysis.graph_models import DependencyGraph


class DeclarationKind(enum.Enum):
    MANIFEST = "manifest"
    CONFIG = "config"


class ReferenceKind(enum.Enum):
    # Inclusion calls
    STYLE_INCLUSION = "style-inclusion"
    SCRIPT_INCLUSION = "script-inclusion"
    COMBINED_INCLUSION = "combined-inclusion"
    # Generic key/value and attribute shapes
    POLICY_ARRAY = "policy-array"
    POLICY_SCALAR = "policy-scalar"
    POLICY_ATTRIBUTE = "policy-attribute"
    COMPONENT_CONFIG = "component-config"
    COMPONENT_CONFIG_SCALAR = "component-config-scalar"
    CATEGORIES_ATTRIBUTE = "categories-attribute"
    CATEGORY_KEY = "category-key"
    JS_FUNCTION_CALL = "js-function-call"


@dataclass
class AssetSet:
    css: list[str] = field(default_factory=list)
    js: list[str] = field(default_factory=list)


@dataclass
class LibraryDeclaration:
    """One declared client library category."""
    category: str
    source_path: Path
    embeds: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    assets: AssetSet = field(default_factory=AssetSet)
    flags: dict[str, bool | str] = field(default_factory=dict)
    aliases: list[str] = field(default_factory=list)  # extra categories of the same folder
    declared_in: Path | None = None

    def __post_init__(self):
        if not self.category:
            raise ValueError("LibraryDeclaration requires a non-empty category")

    @property
    def categories(self) -> list[str]:
        """The category followed by its aliases."""
        return [self.category] + [a for a in self.aliases if a != self.category]

    @property
    def kind(self) -> str:
        return str(self.flags.get("kind", ""))

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "source_path": str(self.source_path),
            "declared_in": str(self.declared_in) if self.declared_in else None,
            "embeds": list(self.embeds),
            "dependencies": list(self.dependencies),
            "assets": asdict(self.assets),
            "flags": dict(self.flags),
            "aliases": list(self.aliases),
        }


@dataclass
class UsageReference:
    """One mention of a category outside its declaration."""
    category: str
    file: Path
    kind: ReferenceKind
    line: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "file": str(self.file),
            "kind": self.kind.value,
            "line": self.line,
        }


@dataclass
class Diagnostic:
    """A file that was skipped, and why."""
    file: Path
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"file": str(self.file), "message": self.message}


@dataclass
class PageUsageSnapshot:
    """Components observed on a rendered page, supplied by the content-tree client."""
    path: str
    template: str | None = None
    components: list[str] = field(default_factory=list)


# Defaults for the file-matching rules
DEFAULT_MANIFEST_PATTERNS: tuple[str, ...] = ("**/.content.xml",)
DEFAULT_CONFIG_PATTERNS: tuple[str, ...] = (
    "**/clientlib.config.js",
    "**/clientlib.config.cjs",
    "**/clientlib.config.mjs",
    "**/clientlib-*.config.js",
)
DEFAULT_TEMPLATE_PATTERNS: tuple[str, ...] = ("**/*.html", "**/*.htl")
DEFAULT_SOURCE_PATTERNS: tuple[str, ...] = (
    "**/*.json", "**/*.js", "**/*.ts", "**/*.xml", "**/*.jsp",
)
DEFAULT_SKIP_DIRS: tuple[str, ...] = (
    "node_modules", ".git", "target", "dist", "build", ".next",
    "__pycache__", ".venv", "venv", "bower_components",
)


@dataclass
class ScanRules:
    """Glob patterns assigning a role to each file under the root."""
    manifest_patterns: tuple[str, ...] = DEFAULT_MANIFEST_PATTERNS
    config_patterns: tuple[str, ...] = DEFAULT_CONFIG_PATTERNS
    template_patterns: tuple[str, ...] = DEFAULT_TEMPLATE_PATTERNS
    source_patterns: tuple[str, ...] = DEFAULT_SOURCE_PATTERNS


def _default_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass
class ScanConfig:
    """Configuration for one analysis run."""
    root: Path = field(default_factory=lambda: Path("."))
    rules: ScanRules = field(default_factory=ScanRules)
    skip_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_SKIP_DIRS))
    max_workers: int = field(default_factory=_default_workers)


@dataclass
class AnalysisResult:
    """Everything one pass over a repository produced."""
    root: Path
    declarations: list[LibraryDeclaration]
    references: list[UsageReference]
    graph: DependencyGraph
    diagnostics: list[Diagnostic] = field(default_factory=list)
    files_scanned: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": str(self.root),
            "files_scanned": self.files_scanned,
            "declarations": [d.to_dict() for d in self.declarations],
            "references": [r.to_dict() for r in self.references],
            "graph": self.graph.to_dict(),
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
