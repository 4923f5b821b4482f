"""Run event log.

Events are numbered and kept in memory; when a path is given they are also appended to an
`events.jsonl` file so a run can be replayed.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from contentgraph.events import ContentType, EventType, RunEvent


@dataclass
class EventLog:
    """Sequence-numbered event log with optional JSONL persistence."""

    run_id: str
    path: Path | None = None
    events: list[RunEvent] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def emit(
        self,
        event_type: EventType,
        content_type: ContentType,
        data: str | dict | list | None = None,
        *,
        metadata: dict[str, str | int | float | bool | None] | None = None,
    ) -> RunEvent:
        """Record the next event of the run."""

        ev = RunEvent(
            run_id=self.run_id,
            seq=len(self.events) + 1,
            event_type=event_type,
            content_type=content_type,
            data=data,
            metadata=dict(metadata or {}),
        )
        self.events.append(ev)
        if self.path is not None:
            line = json.dumps(ev.model_dump(mode="json"), ensure_ascii=False)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        return ev


def iter_events(path: Path) -> list[RunEvent]:
    """Load all events from a JSONL file."""

    events: list[RunEvent] = []
    if not path.exists():
        return events
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line:
            continue
        events.append(RunEvent.model_validate_json(line))
    return events
