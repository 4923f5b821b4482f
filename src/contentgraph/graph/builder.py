"""Document model builder.

Turns a flat sequence of source events into the chapter -> section -> topic tree. The
build is all-or-nothing: nodes are drafted locally and only copied into a `Graph` once
the whole event sequence has been consumed without error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from contentgraph.errors import StructureError, StructureErrorReason
from contentgraph.logging import get_logger
from contentgraph.models.graph import Graph, Node, NodeKind
from contentgraph.models.source import ChapterStart, Paragraph, SectionStart, SourceEvent, TopicItem
from contentgraph.utils.ids import disambiguate, format_node_id

logger = get_logger(__name__)


@dataclass
class _Draft:
    id: str
    title: str
    kind: NodeKind
    depth: int
    ordinal: int
    parent_id: str | None
    line: int | None
    level_skip: bool = False
    children: list[str] = field(default_factory=list)
    text_parts: list[str] = field(default_factory=list)

    def freeze(self) -> Node:
        return Node(
            id=self.id,
            title=self.title,
            kind=self.kind,
            depth=self.depth,
            ordinal=self.ordinal,
            parent_id=self.parent_id,
            children=tuple(self.children),
            text="\n".join(self.text_parts),
            level_skip=self.level_skip,
            line=self.line,
        )


class GraphBuilder:
    """Stateful builder; use :func:`build_graph` unless you need incremental feeding."""

    def __init__(self) -> None:
        self._drafts: dict[str, _Draft] = {}
        self._root_count = 0
        self._chapter: _Draft | None = None
        self._section: _Draft | None = None
        self._current: _Draft | None = None

    def feed(self, event: SourceEvent) -> None:
        """Consume one event."""

        if isinstance(event, ChapterStart):
            self._chapter = self._open(None, event.title, NodeKind.CHAPTER, event)
            self._section = None
            self._current = self._chapter
            return

        if self._chapter is None:
            if isinstance(event, Paragraph):
                logger.debug("Ignoring preamble prose at %s", event.describe())
                return
            raise StructureError(
                f"{event.kind} appears before any chapter",
                reason=StructureErrorReason.ORPHAN_AT_ROOT,
                item=event.describe(),
            )

        if isinstance(event, SectionStart):
            self._section = self._open(self._chapter, event.title, NodeKind.SECTION, event)
            self._current = self._section
        elif isinstance(event, TopicItem):
            parent = self._section or self._chapter
            self._current = self._open(
                parent,
                event.text,
                NodeKind.TOPIC,
                event,
                level_skip=self._section is None,
            )
        elif isinstance(event, Paragraph) and event.text.strip():
            current = self._current or self._chapter
            current.text_parts.append(event.text.strip())

    def finish(self) -> Graph:
        """Materialize the graph from everything fed so far."""

        graph = Graph()
        for draft in self._drafts.values():
            graph.add_node(draft.freeze())
        logger.info(
            "Built graph: %d nodes, %d chapters",
            len(graph),
            self._root_count,
        )
        return graph

    def _open(
        self,
        parent: _Draft | None,
        title: str,
        kind: NodeKind,
        event: ChapterStart | SectionStart | TopicItem,
        *,
        level_skip: bool = False,
    ) -> _Draft:
        title = title.strip()
        if parent is None:
            position = self._root_count + 1
            self._root_count += 1
        else:
            position = len(parent.children) + 1
        ordinal = event.number if event.number is not None else position

        node_id = disambiguate(
            format_node_id(parent.id if parent else None, ordinal, title),
            self._drafts.keys(),
        )
        draft = _Draft(
            id=node_id,
            title=title,
            kind=kind,
            depth=0 if parent is None else parent.depth + 1,
            ordinal=ordinal,
            parent_id=parent.id if parent else None,
            line=event.line,
            level_skip=level_skip,
        )
        self._drafts[node_id] = draft
        if parent is not None:
            parent.children.append(node_id)
        return draft


def build_graph(events: Iterable[SourceEvent]) -> Graph:
    """Build the containment graph from source events.

    Args:
        events: Finite sequence of source events in document order.

    Returns:
        A graph holding only containment structure.

    Raises:
        StructureError: A section or topic precedes the first chapter. Prose before the
            first chapter is preamble and is ignored.
    """

    builder = GraphBuilder()
    for event in events:
        builder.feed(event)
    return builder.finish()
