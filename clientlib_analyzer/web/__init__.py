"""JSON API over analysis results (requires the ``web`` extra)."""

from clientlib_analyzer.web.app import create_app

__all__ = ["create_app"]
