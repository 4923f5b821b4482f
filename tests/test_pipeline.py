"""Tests for the end-to-end pipeline runner."""

from __future__ import annotations

from pathlib import Path

import pytest

from contentgraph.config import Settings
from contentgraph.errors import GraphFrozenError, StructureError
from contentgraph.events import ContentType, EventType
from contentgraph.models.graph import Edge, EdgeKind
from contentgraph.models.plan import PlanConfig
from contentgraph.models.source import ChapterStart, Paragraph, TopicItem
from contentgraph.orchestrator.runner import run_many, run_pipeline
from contentgraph.recording.event_log import iter_events
from contentgraph.sources.markdown import MarkdownEventReader


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(artifacts_dir=tmp_path / "artifacts", record_events=True)


def test_handbook_runs_clean_and_plans(handbook_path: Path, settings: Settings) -> None:
    """It should build, resolve, validate and plan the sample handbook."""

    reader = MarkdownEventReader.from_path(handbook_path, chapter_level=2)
    config = PlanConfig(budget=1, targets=["3-collections.1-lists"])

    result = run_pipeline(reader, plan_config=config, settings=settings, run_id="r1")

    assert result.is_clean
    assert len(result.graph) == 14
    assert result.plan is not None
    assert result.plan.node_ids == ["2-strings.1-string-basics"]
    assert [d.kind.value for d in result.report.diagnostics] == ["budget_exhausted"]
    assert [(e.source, e.target) for e in result.graph.edges(EdgeKind.PREREQUISITE)] == [
        ("3-collections", "2-strings"),
        ("3-collections.1-lists", "2-strings.1-string-basics"),
    ]
    assert [e.content_type for e in result.events] == [
        ContentType.RUN_STARTED,
        ContentType.GRAPH_BUILT,
        ContentType.REFERENCES_RESOLVED,
        ContentType.GRAPH_VALIDATED,
        ContentType.PLAN_COMPUTED,
        ContentType.REPORT_DONE,
    ]
    assert [e.seq for e in result.events] == list(range(1, 7))


def test_clean_graph_is_frozen(handbook_path: Path) -> None:
    """It should reject edits once validation passed."""

    result = run_pipeline(MarkdownEventReader.from_path(handbook_path, chapter_level=2), run_id="r2")

    assert result.graph.frozen
    with pytest.raises(GraphFrozenError):
        result.graph.add_edge(Edge(kind=EdgeKind.PREREQUISITE, source="2-strings", target="4-concurrency"))


def test_events_are_written_as_jsonl(handbook_path: Path, settings: Settings) -> None:
    """It should persist the run's events under the artifacts directory."""

    result = run_pipeline(MarkdownEventReader.from_path(handbook_path, chapter_level=2), settings=settings, run_id="r3")

    path = settings.artifacts_dir / "run_r3" / "events.jsonl"
    loaded = iter_events(path)
    assert [e.content_type for e in loaded] == [e.content_type for e in result.events]
    assert loaded[-1].metadata["node_count"] == 14
    assert loaded[-1].metadata["error_count"] == 0


def test_unclean_graph_skips_planning() -> None:
    """It should report diagnostics and leave the plan empty when validation fails."""

    events = [ChapterStart(title="Strings"), Paragraph(text="Requires Generics.")]

    result = run_pipeline(events, plan_config=PlanConfig.unbounded(), run_id="r4")

    assert not result.is_clean
    assert result.plan is None
    assert not result.graph.frozen
    assert [d.kind.value for d in result.report.errors()] == ["dangling_reference"]
    assert ContentType.PLAN_SKIPPED in [e.content_type for e in result.events]


def test_fatal_error_is_recorded_and_raised(settings: Settings) -> None:
    """It should log a run_failed event naming the stage and item, then re-raise."""

    events = [TopicItem(text="stray", line=1), ChapterStart(title="Strings", line=2)]

    with pytest.raises(StructureError):
        run_pipeline(events, settings=settings, run_id="r5")

    loaded = iter_events(settings.artifacts_dir / "run_r5" / "events.jsonl")
    failed = loaded[-1]
    assert failed.event_type == EventType.ERROR
    assert failed.content_type == ContentType.RUN_FAILED
    assert failed.metadata["stage"] == "build"
    assert "stray" in (failed.metadata["item"] or "")


def test_run_many_keeps_input_order() -> None:
    """It should process independent documents concurrently and return results in order."""

    docs = [
        [ChapterStart(title=f"Chapter {i}"), TopicItem(text=f"Topic {i}")]
        for i in range(6)
    ]

    results = run_many(docs, plan_config=PlanConfig.unbounded(), max_concurrent=2)

    assert [r.graph.node_ids()[0] for r in results] == [f"1-chapter-{i}" for i in range(6)]
    assert all(r.is_clean for r in results)
    assert len({r.run_id for r in results}) == 6


def test_run_many_propagates_fatal_errors() -> None:
    """It should raise the first fatal error after the other documents finish."""

    docs = [[ChapterStart(title="Fine")], [TopicItem(text="stray")]]

    with pytest.raises(StructureError):
        run_many(docs)
