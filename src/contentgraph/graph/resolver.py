"""Reference resolver.

Scans every node's title and prose for declared references and resolves them against the
graph: exact id first, then case-insensitive title match. Ambiguous titles abort the run;
unmatched references are kept as unresolved cross-reference edges so the validator can
report them.
"""

from __future__ import annotations

from contentgraph.errors import AmbiguousReferenceError
from contentgraph.logging import get_logger
from contentgraph.models.graph import Edge, EdgeKind, Graph, Node
from contentgraph.utils.references import RawReference, extract_references

logger = get_logger(__name__)


class ReferenceResolver:
    """Resolve textual references to node ids."""

    def __init__(self, graph: Graph) -> None:
        self._graph = graph

    def resolve(self, target: str, *, item: str | None = None) -> str | None:
        """Resolve a reference target to a node id.

        Args:
            target: Node id, anchor (`#3-strings`) or title.
            item: Locator used in the error when the target is ambiguous.

        Returns:
            The node id, or None when nothing matches.

        Raises:
            AmbiguousReferenceError: Several nodes share the matching title.
        """

        target = target.strip()
        if target in self._graph:
            return target
        bare = target.lstrip("#")
        if bare != target and bare in self._graph:
            return bare

        matches = self._graph.find_by_title(bare)
        if len(matches) > 1:
            raise AmbiguousReferenceError(target, [n.id for n in matches], item=item)
        if matches:
            return matches[0].id
        return None

    def edges_for(self, node: Node) -> list[Edge]:
        """Edges declared by one node's text."""

        text = f"{node.title}\n{node.text}" if node.text else node.title
        return [self._to_edge(node, ref) for ref in extract_references(text)]

    def run(self) -> int:
        """Resolve every node and append the edges. Returns the number of new edges."""

        pending: list[Edge] = []
        for node in self._graph:
            pending.extend(self.edges_for(node))

        # Nothing is appended unless every node resolved without an ambiguity error.
        added = sum(1 for edge in pending if self._graph.add_edge(edge))
        unresolved = sum(1 for edge in pending if not edge.resolved)
        logger.info("Resolved references: %d edges added, %d unresolved", added, unresolved)
        return added

    def _to_edge(self, node: Node, ref: RawReference) -> Edge:
        source = node.id
        if ref.dependent is not None:
            dependent = self.resolve(ref.dependent, item=node.id)
            if dependent is None:
                logger.debug("Unresolved dependent %r in %s", ref.dependent, node.id)
                return Edge(
                    kind=EdgeKind.CROSS_REFERENCE,
                    source=node.id,
                    target=ref.dependent,
                    resolved=False,
                    raw=ref.raw,
                )
            source = dependent

        target = self.resolve(ref.target, item=node.id)
        if target is None:
            logger.debug("Unresolved reference %r in %s", ref.target, node.id)
            return Edge(
                kind=EdgeKind.CROSS_REFERENCE,
                source=source,
                target=ref.target,
                resolved=False,
                raw=ref.raw,
            )
        return Edge(kind=ref.kind, source=source, target=target, raw=ref.raw)


def resolve_references(graph: Graph) -> Graph:
    """Append declared cross-reference and prerequisite edges to `graph`.

    Args:
        graph: Graph produced by the builder.

    Returns:
        The same graph, with edges appended.

    Raises:
        AmbiguousReferenceError: A title reference matches several nodes. No edges are
            appended in that case.
    """

    ReferenceResolver(graph).run()
    return graph
