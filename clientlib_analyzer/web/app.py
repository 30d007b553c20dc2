"""FastAPI application factory."""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI

from clientlib_analyzer import __version__
from clientlib_analyzer.web.api import router
from clientlib_analyzer.web.state import AppState


def create_app(allowed_root: Path | None = None) -> FastAPI:
    """Build the app; scans are limited to paths under allowed_root (home by default)."""
    app = FastAPI(title="clientlib-analyzer", version=__version__)
    app.state.allowed_root = (allowed_root or Path.home()).resolve()
    app.state.scans = AppState()
    app.include_router(router)
    return app
