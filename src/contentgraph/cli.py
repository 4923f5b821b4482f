"""CLI entrypoints for contentgraph."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from contentgraph.config import Settings, load_settings
from contentgraph.errors import ContentGraphError
from contentgraph.logging import configure_logging, get_logger
from contentgraph.models.plan import PlanConfig, load_plan_config
from contentgraph.orchestrator.runner import PipelineResult, run_pipeline
from contentgraph.reporting.report import render_report
from contentgraph.sources.markdown import MarkdownEventReader

app = typer.Typer(add_completion=False, help="Handbook topic-graph checker and study planner")
logger = get_logger(__name__)

_SOURCE_ARG = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Markdown handbook")
_CHAPTER_LEVEL_OPT = typer.Option(
    None,
    "--chapter-level",
    help="Heading level that opens a chapter (overrides CONTENTGRAPH_CHAPTER_HEADING_LEVEL)",
)


def _setup(chapter_level: int | None) -> Settings:
    try:
        settings = load_settings(chapter_heading_level=chapter_level)
    except ValidationError as e:
        raise typer.BadParameter(str(e), param_hint="--chapter-level") from e
    configure_logging(settings.log_level)
    return settings


def _run(source: Path, settings: Settings, plan_config: PlanConfig | None = None) -> PipelineResult:
    logger.info("CLI run requested for %s", source)
    reader = MarkdownEventReader.from_path(source, chapter_level=settings.chapter_heading_level)
    try:
        return run_pipeline(reader, plan_config=plan_config, settings=settings)
    except ContentGraphError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=2) from e


def _parse_pairs(values: list[str] | None, option: str) -> dict[str, float]:
    out: dict[str, float] = {}
    for raw in values or []:
        node_id, sep, number = raw.rpartition("=")
        try:
            if not sep or not node_id:
                raise ValueError(raw)
            out[node_id.strip()] = float(number)
        except ValueError:
            raise typer.BadParameter(f"expected NODE_ID=NUMBER, got {raw!r}", param_hint=option) from None
    return out


@app.command()
def check(
    source: Path = _SOURCE_ARG,
    chapter_level: int | None = _CHAPTER_LEVEL_OPT,
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
) -> None:
    """Validate a handbook and print its diagnostics. Exits 1 when the graph is not clean."""

    settings = _setup(chapter_level)
    result = _run(source, settings)
    if as_json:
        typer.echo(result.report.model_dump_json(indent=2))
    else:
        render_report(result.report, Console())
    if not result.is_clean:
        raise typer.Exit(code=1)


@app.command()
def plan(
    source: Path = _SOURCE_ARG,
    budget: float | None = typer.Option(None, "--budget", "-b", help="Total effort units available"),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        help="JSON plan configuration (budget, effort_overrides, priority_overrides, targets)",
    ),
    target: list[str] | None = typer.Option(None, "--target", "-t", help="Restrict the plan to this node and its prerequisites"),
    priority: list[str] | None = typer.Option(None, "--priority", help="NODE_ID=WEIGHT, higher is earlier"),
    effort: list[str] | None = typer.Option(None, "--effort", help="NODE_ID=COST"),
    chapter_level: int | None = _CHAPTER_LEVEL_OPT,
    as_json: bool = typer.Option(False, "--json", help="Print plan and report as JSON"),
) -> None:
    """Compute a study plan under a budget. Exits 1 when the graph is not clean."""

    settings = _setup(chapter_level)
    plan_config = _plan_config(settings, budget, config, target, priority, effort)
    result = _run(source, settings, plan_config)

    if as_json:
        payload = {
            "plan": result.plan.model_dump(mode="json") if result.plan is not None else None,
            "report": result.report.model_dump(mode="json"),
        }
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        console = Console()
        if result.plan is not None:
            table = Table(title=f"Study plan (budget {plan_config.budget:g})")
            table.add_column("#", justify="right")
            table.add_column("Node", overflow="fold")
            table.add_column("Title", overflow="fold")
            table.add_column("Effort", justify="right")
            table.add_column("Cumulative", justify="right")
            for i, step in enumerate(result.plan.steps, start=1):
                node = result.graph.get(step.node_id)
                table.add_row(str(i), step.node_id, node.title, f"{step.effort:g}", f"{step.cumulative_cost:g}")
            console.print(table)
        render_report(result.report, console)
    if not result.is_clean:
        raise typer.Exit(code=1)


@app.command()
def nodes(
    source: Path = _SOURCE_ARG,
    chapter_level: int | None = _CHAPTER_LEVEL_OPT,
) -> None:
    """List node ids in document order, indented by depth."""

    settings = _setup(chapter_level)
    result = _run(source, settings)
    for node in result.graph:
        typer.echo(f"{'  ' * node.depth}{node.id}")


def _plan_config(
    settings: Settings,
    budget: float | None,
    config: Path | None,
    target: list[str] | None,
    priority: list[str] | None,
    effort: list[str] | None,
) -> PlanConfig:
    if config is None and budget is None:
        raise typer.BadParameter("provide --budget or a --config with a budget", param_hint="--budget")
    try:
        if config is not None:
            base = load_plan_config(config, budget=budget)
        else:
            base = PlanConfig(budget=budget, default_effort=settings.default_effort)
    except ValueError as e:
        # JSONDecodeError and pydantic ValidationError are both ValueError subclasses.
        raise typer.BadParameter(str(e), param_hint="--config/--budget") from e
    try:
        return PlanConfig.model_validate(
            {
                **base.model_dump(),
                "targets": [*base.targets, *(target or [])],
                "priority_overrides": {**base.priority_overrides, **_parse_pairs(priority, "--priority")},
                "effort_overrides": {**base.effort_overrides, **_parse_pairs(effort, "--effort")},
            }
        )
    except ValidationError as e:
        raise typer.BadParameter(str(e), param_hint="--config/--budget") from e


if __name__ == "__main__":
    app()
