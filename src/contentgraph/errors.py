"""Fatal pipeline errors.

Validator findings are never raised; they are collected as diagnostics. Only the
conditions below abort a run, and each one names the stage and the input item
that caused it.
"""

from __future__ import annotations

from enum import Enum


class StructureErrorReason(str, Enum):
    ORPHAN_AT_ROOT = "orphan_at_root"


class PlanningErrorReason(str, Enum):
    CYCLIC_INPUT = "cyclic_input"
    UNCLEAN_GRAPH = "unclean_graph"


class ContentGraphError(RuntimeError):
    """Base class for fatal errors raised by a pipeline stage."""

    stage = "-"

    def __init__(self, message: str, *, item: str | None = None) -> None:
        super().__init__(message)
        self.item = item

    def __str__(self) -> str:
        base = super().__str__()
        if self.item:
            return f"[{self.stage}] {base} (at {self.item})"
        return f"[{self.stage}] {base}"


class StructureError(ContentGraphError):
    stage = "build"

    def __init__(self, message: str, *, reason: StructureErrorReason, item: str | None = None) -> None:
        super().__init__(message, item=item)
        self.reason = reason


class AmbiguousReferenceError(ContentGraphError):
    stage = "resolve"

    def __init__(self, reference: str, candidates: list[str], *, item: str | None = None) -> None:
        super().__init__(
            f"reference {reference!r} matches {len(candidates)} nodes: {', '.join(candidates)}",
            item=item,
        )
        self.reference = reference
        self.candidates = list(candidates)


class PlanningError(ContentGraphError):
    stage = "plan"

    def __init__(self, message: str, *, reason: PlanningErrorReason, item: str | None = None) -> None:
        super().__init__(message, item=item)
        self.reason = reason


class GraphFrozenError(ContentGraphError):
    stage = "graph"
