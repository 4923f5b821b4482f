"""Pydantic models used across the project."""

from __future__ import annotations

from contentgraph.models.diagnostics import Diagnostic, DiagnosticKind, Severity
from contentgraph.models.graph import Edge, EdgeKind, Graph, Node, NodeKind
from contentgraph.models.plan import PlanConfig, PlanStep, StudyPlan, load_plan_config
from contentgraph.models.source import ChapterStart, Paragraph, SectionStart, SourceEvent, TopicItem

__all__ = [
    "ChapterStart",
    "Diagnostic",
    "DiagnosticKind",
    "Edge",
    "EdgeKind",
    "Graph",
    "Node",
    "NodeKind",
    "Paragraph",
    "PlanConfig",
    "PlanStep",
    "SectionStart",
    "Severity",
    "SourceEvent",
    "StudyPlan",
    "TopicItem",
    "load_plan_config",
]
