"""End-to-end pipeline runner.

Builder -> Resolver -> Validator -> Planner -> Reporter, strictly in sequence. Each run owns
its graph, so independent documents can be processed concurrently without locking.
"""

from __future__ import annotations

import asyncio
import contextlib
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from contentgraph.config import Settings
from contentgraph.errors import ContentGraphError
from contentgraph.events import ContentType, EventType, RunEvent
from contentgraph.graph.builder import build_graph
from contentgraph.graph.resolver import resolve_references
from contentgraph.graph.validator import validate_graph
from contentgraph.logging import get_logger, log_exception, run_context, stage_scope
from contentgraph.models.diagnostics import Diagnostic
from contentgraph.models.graph import Graph
from contentgraph.models.plan import PlanConfig, StudyPlan
from contentgraph.models.source import SourceEvent
from contentgraph.orchestrator.state import RunState
from contentgraph.planning.planner import plan_study
from contentgraph.recording.event_log import EventLog
from contentgraph.reporting.report import DiagnosticsReport, build_report

logger = get_logger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    """Everything a successful run produces."""

    run_id: str
    graph: Graph
    report: DiagnosticsReport
    plan: StudyPlan | None = None
    events: list[RunEvent] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return self.report.is_clean


def new_run_id() -> str:
    # Time-based for readability plus a short random suffix to avoid collisions.
    ts = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    return f"{ts}_{uuid.uuid4().hex[:8]}"


def run_pipeline(
    events: Iterable[SourceEvent],
    *,
    plan_config: PlanConfig | None = None,
    settings: Settings | None = None,
    run_id: str | None = None,
) -> PipelineResult:
    """Run every stage over one document.

    Planning runs only when `plan_config` is given and the graph validated clean; the
    graph is frozen as soon as validation reports no errors.

    Args:
        events: Source events of one document.
        plan_config: Optional planning configuration.
        settings: Settings controlling event recording.
        run_id: Explicit run id; generated when omitted.

    Returns:
        Graph, report and optional plan.

    Raises:
        ContentGraphError: A fatal builder, resolver or planner error. The error names the
            stage and the input item that caused it.
    """

    settings = settings or Settings()
    run_id = run_id or new_run_id()
    log = EventLog(run_id=run_id, path=_events_path(settings, run_id))
    state = RunState(run_id=run_id)

    with run_context(run_id=run_id, stage="init"):
        log.emit(EventType.SYSTEM, ContentType.RUN_STARTED, "run_started")
        try:
            return _run_stages(events, plan_config, log, state)
        except ContentGraphError as e:
            log_exception(logger, "Run failed", stage=e.stage, item=e.item)
            log.emit(
                EventType.ERROR,
                ContentType.RUN_FAILED,
                str(e),
                metadata={"stage": e.stage, "item": e.item},
            )
            raise


def _run_stages(
    events: Iterable[SourceEvent],
    plan_config: PlanConfig | None,
    log: EventLog,
    state: RunState,
) -> PipelineResult:
    with _stage(state, "build"):
        graph = build_graph(events)
        state.node_count = len(graph)
        log.emit(EventType.STAGE, ContentType.GRAPH_BUILT, metadata={"nodes": len(graph)})

    with _stage(state, "resolve"):
        resolve_references(graph)
        state.edge_count = len(graph.edges())
        log.emit(EventType.STAGE, ContentType.REFERENCES_RESOLVED, metadata={"edges": state.edge_count})

    with _stage(state, "validate"):
        validation = validate_graph(graph)
        state.error_count = sum(1 for d in validation if d.is_error)
        state.warning_count = len(validation) - state.error_count
        clean = state.error_count == 0
        if clean:
            graph.freeze()
        log.emit(
            EventType.STAGE,
            ContentType.GRAPH_VALIDATED,
            metadata={"errors": state.error_count, "warnings": state.warning_count},
        )

    plan: StudyPlan | None = None
    planning: list[Diagnostic] = []
    if plan_config is not None:
        with _stage(state, "plan"):
            if clean:
                result = plan_study(graph, plan_config)
                plan = result.plan
                planning = result.diagnostics
                state.planned_count = len(plan)
                log.emit(
                    EventType.STAGE,
                    ContentType.PLAN_COMPUTED,
                    {"node_ids": plan.node_ids},
                    metadata={"total_cost": plan.total_cost},
                )
            else:
                logger.warning("Skipping planning: graph has %d error(s)", state.error_count)
                log.emit(EventType.STAGE, ContentType.PLAN_SKIPPED, "graph not clean")

    with _stage(state, "report"):
        report = build_report(validation, planning)
        log.emit(EventType.SYSTEM, ContentType.REPORT_DONE, metadata=state.snapshot())
    return PipelineResult(run_id=state.run_id, graph=graph, report=report, plan=plan, events=list(log.events))


@contextlib.contextmanager
def _stage(state: RunState, name: str) -> Iterator[None]:
    state.stage = name
    with stage_scope(name, logger):
        yield


def _events_path(settings: Settings, run_id: str) -> Path | None:
    if not settings.record_events:
        return None
    return settings.artifacts_dir / f"run_{run_id}" / "events.jsonl"


async def run_pipeline_async(
    events: Iterable[SourceEvent],
    *,
    plan_config: PlanConfig | None = None,
    settings: Settings | None = None,
    run_id: str | None = None,
) -> PipelineResult:
    """Async variant of :func:`run_pipeline`.

    The pipeline is CPU-bound and synchronous; it is offloaded to a worker thread so it does
    not block the event loop.
    """

    return await asyncio.to_thread(
        run_pipeline,
        events,
        plan_config=plan_config,
        settings=settings,
        run_id=run_id,
    )


async def run_many_async(
    documents: Sequence[Iterable[SourceEvent]],
    *,
    plan_config: PlanConfig | None = None,
    settings: Settings | None = None,
    max_concurrent: int | None = None,
) -> list[PipelineResult]:
    """Run independent documents concurrently; results keep input order.

    A fatal error in one document propagates after the others finish.
    """

    settings = settings or Settings()
    semaphore = asyncio.Semaphore(max_concurrent or settings.max_concurrent)

    async def _one(doc: Iterable[SourceEvent]) -> PipelineResult:
        async with semaphore:
            return await run_pipeline_async(doc, plan_config=plan_config, settings=settings)

    results = await asyncio.gather(*(_one(doc) for doc in documents), return_exceptions=True)
    for r in results:
        if isinstance(r, BaseException):
            raise r
    return [r for r in results if isinstance(r, PipelineResult)]


def run_many(
    documents: Sequence[Iterable[SourceEvent]],
    *,
    plan_config: PlanConfig | None = None,
    settings: Settings | None = None,
    max_concurrent: int | None = None,
) -> list[PipelineResult]:
    """Blocking wrapper around :func:`run_many_async`."""

    return asyncio.run(
        run_many_async(documents, plan_config=plan_config, settings=settings, max_concurrent=max_concurrent)
    )
