"""Build, resolve and validate the topic graph."""

from __future__ import annotations

from contentgraph.graph.builder import GraphBuilder, build_graph
from contentgraph.graph.resolver import ReferenceResolver, resolve_references
from contentgraph.graph.validator import is_clean, validate_graph

__all__ = [
    "GraphBuilder",
    "ReferenceResolver",
    "build_graph",
    "is_clean",
    "resolve_references",
    "validate_graph",
]
