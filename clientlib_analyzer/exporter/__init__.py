"""Exporter layer."""

from clientlib_analyzer.exporter.manifest_writer import write_manifest
from clientlib_analyzer.exporter.report_writer import generate_summary, write_report

__all__ = ["generate_summary", "write_manifest", "write_report"]
