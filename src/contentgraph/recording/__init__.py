"""Recording utilities for run events."""

from __future__ import annotations

from contentgraph.recording.event_log import EventLog, iter_events

__all__ = ["EventLog", "iter_events"]
