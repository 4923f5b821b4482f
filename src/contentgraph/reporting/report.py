"""Diagnostics reporter.

Pure aggregation of validator and planner diagnostics: errors before warnings, then by the
first offending node id.
"""

from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, Field, computed_field
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from contentgraph.models.diagnostics import Diagnostic, Severity


def _sort_key(d: Diagnostic) -> tuple[int, str, str, str]:
    first = d.node_ids[0] if d.node_ids else ""
    return (d.severity.rank, first, d.kind.value, d.message)


class DiagnosticsReport(BaseModel):
    """Severity-ranked diagnostics for one run."""

    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_clean(self) -> bool:
        return self.error_count == 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def error_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == Severity.ERROR)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == Severity.WARNING)

    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]


def build_report(*groups: Iterable[Diagnostic]) -> DiagnosticsReport:
    """Merge diagnostic groups into one ordered report."""

    merged = [d for group in groups for d in group]
    merged.sort(key=_sort_key)
    return DiagnosticsReport(diagnostics=merged)


def render_report(report: DiagnosticsReport, console: Console | None = None) -> None:
    """Print the report as a table."""

    console = console or Console()
    if not report.diagnostics:
        console.print("[green]clean: no diagnostics[/green]")
        return

    table = Table(title="Diagnostics", show_lines=False)
    table.add_column("Severity")
    table.add_column("Kind")
    table.add_column("Nodes", overflow="fold")
    table.add_column("Message", overflow="fold")
    for d in report.diagnostics:
        style = "red" if d.severity == Severity.ERROR else "yellow"
        table.add_row(f"[{style}]{d.severity.value}[/{style}]", d.kind.value, escape(", ".join(d.node_ids)), escape(d.message))
    console.print(table)
    status = "[green]clean[/green]" if report.is_clean else "[red]not clean[/red]"
    console.print(f"{status}: {report.error_count} error(s), {report.warning_count} warning(s)")
