"""Graph validator.

`validate_graph` is pure: it never mutates the graph and never raises on defects. All four
checks always run so a single pass reports every problem.
"""

from __future__ import annotations

from collections import Counter, deque
from typing import Iterator

from contentgraph.logging import get_logger
from contentgraph.models.diagnostics import Diagnostic, DiagnosticKind
from contentgraph.models.graph import Graph, Node

logger = get_logger(__name__)

_WHITE, _GRAY, _BLACK = 0, 1, 2


def validate_graph(graph: Graph) -> list[Diagnostic]:
    """Run every structural check.

    Args:
        graph: Graph after reference resolution.

    Returns:
        Diagnostics in check order: dangling, orphan, cycle, numbering.
    """

    diagnostics: list[Diagnostic] = []
    diagnostics.extend(check_dangling_edges(graph))
    diagnostics.extend(check_orphan_nodes(graph))
    diagnostics.extend(check_prerequisite_cycles(graph))
    diagnostics.extend(check_numbering(graph))

    errors = sum(1 for d in diagnostics if d.is_error)
    logger.info(
        "Validated graph: %d errors, %d warnings",
        errors,
        len(diagnostics) - errors,
    )
    return diagnostics


def check_dangling_edges(graph: Graph) -> Iterator[Diagnostic]:
    """Edges (declared or containment) with an end missing from the node mapping."""

    for edge in [*graph.edges(), *graph.containment_edges()]:
        missing = [end for end in (edge.source, edge.target) if end not in graph]
        if not missing:
            continue
        if not edge.resolved:
            message = f"unresolved reference {edge.target!r} in {edge.source}"
            if edge.raw:
                message += f" ({edge.raw})"
        else:
            message = f"{edge.kind.value} edge {edge.describe()} points to missing node(s): {', '.join(missing)}"
        yield Diagnostic.error(DiagnosticKind.DANGLING_REFERENCE, [edge.source, edge.target], message)


def check_orphan_nodes(graph: Graph) -> Iterator[Diagnostic]:
    """Non-root nodes that no chapter reaches through containment."""

    reachable: set[str] = set()
    queue = deque(root.id for root in graph.roots())
    while queue:
        node_id = queue.popleft()
        if node_id in reachable:
            continue
        reachable.add(node_id)
        queue.extend(child.id for child in graph.children_of(node_id))

    for node in graph:
        if node.id in reachable:
            continue
        if node.parent_id is not None and node.parent_id not in graph:
            reason = f"parent {node.parent_id} does not exist"
        else:
            reason = "not reachable from any chapter"
        yield Diagnostic.error(DiagnosticKind.ORPHAN_NODE, [node.id], f"orphan node {node.id}: {reason}")


def check_prerequisite_cycles(graph: Graph) -> Iterator[Diagnostic]:
    """Three-colour DFS over prerequisite edges; one diagnostic per back-edge.

    Iterative so deep chains cannot exhaust the interpreter stack. Each node and edge is
    visited once.
    """

    color = {node_id: _WHITE for node_id in graph.node_ids()}
    for start in graph.node_ids():
        if color[start] != _WHITE:
            continue
        path: list[str] = [start]
        on_path: dict[str, int] = {start: 0}
        stack = [iter(graph.prerequisites_of(start))]
        color[start] = _GRAY

        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                done = path.pop()
                del on_path[done]
                color[done] = _BLACK
                stack.pop()
                continue
            if nxt not in color:
                # Dangling; reported by check_dangling_edges.
                continue
            if color[nxt] == _GRAY:
                cycle = path[on_path[nxt]:] + [nxt]
                yield Diagnostic.error(
                    DiagnosticKind.PREREQUISITE_CYCLE,
                    cycle,
                    "prerequisite cycle: " + " -> ".join(cycle),
                )
            elif color[nxt] == _WHITE:
                color[nxt] = _GRAY
                on_path[nxt] = len(path)
                path.append(nxt)
                stack.append(iter(graph.prerequisites_of(nxt)))


def check_numbering(graph: Graph) -> Iterator[Diagnostic]:
    """Sibling ordinals must be exactly 1..N under each parent and among chapters."""

    yield from _check_siblings(graph.roots(), "chapters")
    for node in graph:
        if node.children:
            yield from _check_siblings(graph.children_of(node.id), f"children of {node.id}")


def _check_siblings(siblings: list[Node], scope: str) -> Iterator[Diagnostic]:
    n = len(siblings)
    ordinals = [s.ordinal for s in siblings]
    if sorted(ordinals) == list(range(1, n + 1)):
        return

    counts = Counter(ordinals)
    offenders = [s.id for s in siblings if counts[s.ordinal] > 1 or not 1 <= s.ordinal <= n]
    yield Diagnostic.warning(
        DiagnosticKind.NUMBERING_GAP,
        offenders,
        f"numbering of {scope} is {ordinals}, expected 1..{n}",
    )


def is_clean(diagnostics: list[Diagnostic]) -> bool:
    """True when no diagnostic is an error."""

    return not any(d.is_error for d in diagnostics)
