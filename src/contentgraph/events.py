"""Event model used for run logs and replay.

Each pipeline run produces a sequence of events. Events are recorded to JSONL so a run can
be inspected later (e.g., for audits of why a handbook failed validation).
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """High-level event categories."""

    SYSTEM = "system"
    STAGE = "stage"
    ERROR = "error"


class ContentType(str, Enum):
    """Semantic types within event streams."""

    RUN_STARTED = "run_started"
    GRAPH_BUILT = "graph_built"
    REFERENCES_RESOLVED = "references_resolved"
    GRAPH_VALIDATED = "graph_validated"
    PLAN_COMPUTED = "plan_computed"
    PLAN_SKIPPED = "plan_skipped"
    REPORT_DONE = "report_done"
    RUN_FAILED = "run_failed"


class RunEvent(BaseModel):
    """A single event in a run."""

    run_id: str
    seq: int = Field(ge=1)
    ts: datetime = Field(default_factory=lambda: datetime.now(UTC))

    event_type: EventType
    content_type: ContentType

    data: str | dict | list | None = None
    metadata: dict[str, str | int | float | bool | None] = Field(default_factory=dict)
