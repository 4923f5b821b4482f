"""Diagnostics aggregation and rendering."""

from __future__ import annotations

from contentgraph.reporting.report import DiagnosticsReport, build_report, render_report

__all__ = ["DiagnosticsReport", "build_report", "render_report"]
