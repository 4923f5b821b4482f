"""Topic graph models.

The graph owns the containment tree (nodes with ordered child ids) plus the declared
cross-reference and prerequisite edges. Containment edges are derived from the tree and
never stored.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field

from contentgraph.errors import GraphFrozenError
from contentgraph.utils.ids import normalize_title, strip_leading_ordinal


class NodeKind(str, Enum):
    CHAPTER = "chapter"
    SECTION = "section"
    TOPIC = "topic"


class EdgeKind(str, Enum):
    CONTAINMENT = "containment"
    CROSS_REFERENCE = "cross_reference"
    PREREQUISITE = "prerequisite"


class Node(BaseModel):
    """A chapter, section or topic."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    title: str
    kind: NodeKind
    depth: int = Field(ge=0, le=2)
    ordinal: int = Field(ge=0)
    parent_id: str | None = None
    children: tuple[str, ...] = ()
    text: str = ""
    # Topic attached directly under a chapter.
    level_skip: bool = False
    line: int | None = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


class Edge(BaseModel):
    """A directed edge.

    For prerequisite edges `source` requires `target`. Unresolved references keep the raw
    reference text as `target`.
    """

    model_config = ConfigDict(frozen=True)

    kind: EdgeKind
    source: str
    target: str
    resolved: bool = True
    raw: str | None = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.kind.value, self.source, self.target)

    def describe(self) -> str:
        arrow = "requires" if self.kind == EdgeKind.PREREQUISITE else "->"
        return f"{self.source} {arrow} {self.target}"


class Graph:
    """Node mapping in document order plus declared edges.

    Forward/reverse adjacency is maintained for prerequisite edges only. Once frozen, the
    graph rejects further mutation.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, Node] = {}
        self._positions: dict[str, int] = {}
        self._edges: list[Edge] = []
        self._edge_keys: set[tuple[str, str, str]] = set()
        self._forward: dict[str, list[str]] = {}
        self._reverse: dict[str, list[str]] = {}
        self._frozen = False

    # -- mutation --------------------------------------------------------------

    def add_node(self, node: Node) -> None:
        """Add a node; document order is insertion order."""

        self._check_mutable()
        if node.id in self._nodes:
            raise ValueError(f"duplicate node id: {node.id}")
        self._positions[node.id] = len(self._nodes)
        self._nodes[node.id] = node

    def add_edge(self, edge: Edge) -> bool:
        """Add an edge. Returns False when an identical edge already exists."""

        self._check_mutable()
        if edge.key in self._edge_keys:
            return False
        self._edge_keys.add(edge.key)
        self._edges.append(edge)
        if edge.kind == EdgeKind.PREREQUISITE:
            self._forward.setdefault(edge.source, []).append(edge.target)
            self._reverse.setdefault(edge.target, []).append(edge.source)
        return True

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise GraphFrozenError("graph is frozen after validation")

    # -- queries ---------------------------------------------------------------

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def get(self, node_id: str) -> Node:
        """Get a node by id. Raises KeyError when missing."""

        return self._nodes[node_id]

    def position(self, node_id: str) -> int:
        """Document-order index of a node."""

        return self._positions[node_id]

    def node_ids(self) -> list[str]:
        return list(self._nodes)

    def roots(self) -> list[Node]:
        return [n for n in self._nodes.values() if n.is_root]

    def children_of(self, node_id: str) -> list[Node]:
        """Existing children of a node, in declared order."""

        return [self._nodes[c] for c in self._nodes[node_id].children if c in self._nodes]

    def edges(self, kind: EdgeKind | None = None) -> list[Edge]:
        if kind is None:
            return list(self._edges)
        if kind == EdgeKind.CONTAINMENT:
            return list(self.containment_edges())
        return [e for e in self._edges if e.kind == kind]

    def containment_edges(self) -> Iterator[Edge]:
        """Derive parent -> child edges from the tree."""

        for node in self._nodes.values():
            for child_id in node.children:
                yield Edge(kind=EdgeKind.CONTAINMENT, source=node.id, target=child_id)

    def prerequisites_of(self, node_id: str) -> list[str]:
        """Ids that `node_id` requires (forward adjacency)."""

        return list(self._forward.get(node_id, ()))

    def dependents_of(self, node_id: str) -> list[str]:
        """Ids that require `node_id` (reverse adjacency)."""

        return list(self._reverse.get(node_id, ()))

    def find_by_title(self, title: str) -> list[Node]:
        """Case-insensitive title match across the whole graph.

        A target carrying a leading ordinal (`3-strings`, `3. Strings`) also matches the bare
        title `Strings`.
        """

        wanted = normalize_title(title)
        if not wanted:
            return []
        exact: list[Node] = []
        loose: list[Node] = []
        bare = strip_leading_ordinal(wanted)
        for node in self._nodes.values():
            have = normalize_title(node.title)
            if have == wanted:
                exact.append(node)
            elif bare and have == bare:
                loose.append(node)
        return exact or loose
