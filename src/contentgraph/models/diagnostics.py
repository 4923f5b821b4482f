"""Diagnostic models shared by the validator, planner and reporter."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"

    @property
    def rank(self) -> int:
        return 0 if self is Severity.ERROR else 1


class DiagnosticKind(str, Enum):
    # Validator
    DANGLING_REFERENCE = "dangling_reference"
    ORPHAN_NODE = "orphan_node"
    PREREQUISITE_CYCLE = "prerequisite_cycle"
    NUMBERING_GAP = "numbering_gap"

    # Planner
    UNKNOWN_OVERRIDE = "unknown_override"
    BUDGET_EXHAUSTED = "budget_exhausted"


class Diagnostic(BaseModel):
    """A single finding."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    kind: DiagnosticKind
    node_ids: tuple[str, ...] = Field(default_factory=tuple)
    message: str

    @classmethod
    def error(cls, kind: DiagnosticKind, node_ids: list[str], message: str) -> Diagnostic:
        return cls(severity=Severity.ERROR, kind=kind, node_ids=tuple(node_ids), message=message)

    @classmethod
    def warning(cls, kind: DiagnosticKind, node_ids: list[str], message: str) -> Diagnostic:
        return cls(severity=Severity.WARNING, kind=kind, node_ids=tuple(node_ids), message=message)

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR
