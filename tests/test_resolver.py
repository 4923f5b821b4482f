"""Tests for the reference resolver."""

from __future__ import annotations

import pytest

from contentgraph.errors import AmbiguousReferenceError
from contentgraph.graph.builder import build_graph
from contentgraph.graph.resolver import ReferenceResolver, resolve_references
from contentgraph.models.graph import Edge, EdgeKind
from contentgraph.models.source import ChapterStart, Paragraph, SectionStart, TopicItem


def _toc_graph_events(*extra) -> list:
    return [
        ChapterStart(title="Contents"),
        TopicItem(text="[Strings](#strings)"),
        TopicItem(text="[Collections](#3-collections)"),
        ChapterStart(title="Strings"),
        SectionStart(title="String Basics"),
        ChapterStart(title="Collections"),
        *extra,
    ]


def test_exact_id_always_resolves(three_chapter_events: list) -> None:
    """It should resolve every existing id to itself."""

    graph = build_graph(three_chapter_events)
    resolver = ReferenceResolver(graph)

    for node in graph:
        assert resolver.resolve(node.id) == node.id


def test_title_match_is_case_insensitive(three_chapter_events: list) -> None:
    """It should fall back to a case-insensitive title match across the whole graph."""

    graph = build_graph(three_chapter_events)
    resolver = ReferenceResolver(graph)

    assert resolver.resolve("STRING basics") == "1-strings.1-string-basics"
    assert resolver.resolve("Nope") is None


def test_toc_links_resolve_by_id_or_anchor() -> None:
    """It should resolve TOC anchors by exact id, then by title."""

    graph = resolve_references(build_graph(_toc_graph_events()))

    edges = graph.edges(EdgeKind.CROSS_REFERENCE)
    assert [(e.source, e.target, e.resolved) for e in edges] == [
        ("1-contents.1-strings-strings", "2-strings", True),
        ("1-contents.2-collections-3-collections", "3-collections", True),
    ]


def test_prerequisite_edges_point_from_dependent_to_prerequisite(three_chapter_events: list) -> None:
    """It should record 'Lists requires String Basics' as Lists -> String Basics."""

    graph = resolve_references(build_graph(three_chapter_events))

    assert graph.edges(EdgeKind.PREREQUISITE) == [
        Edge(
            kind=EdgeKind.PREREQUISITE,
            source="2-collections.1-lists",
            target="1-strings.1-string-basics",
            raw="Requires String Basics",
        )
    ]
    assert graph.prerequisites_of("2-collections.1-lists") == ["1-strings.1-string-basics"]
    assert graph.dependents_of("1-strings.1-string-basics") == ["2-collections.1-lists"]


def test_before_phrase_can_link_other_nodes() -> None:
    """It should take the dependent from the phrase, not from the node carrying it."""

    graph = resolve_references(
        build_graph(_toc_graph_events(Paragraph(text="Before Collections go through Strings.")))
    )

    assert [(e.source, e.target) for e in graph.edges(EdgeKind.PREREQUISITE)] == [
        ("3-collections", "2-strings"),
    ]


def test_unresolved_references_are_kept() -> None:
    """It should keep unmatched references as unresolved cross-reference edges."""

    graph = resolve_references(
        build_graph(
            [
                ChapterStart(title="Strings"),
                Paragraph(text="See also Generics. Requires Lambdas."),
                Paragraph(text="Before Streams go through Strings."),
            ]
        )
    )

    unresolved = [(e.kind, e.source, e.target) for e in graph.edges() if not e.resolved]
    assert unresolved == [
        (EdgeKind.CROSS_REFERENCE, "1-strings", "Generics"),
        (EdgeKind.CROSS_REFERENCE, "1-strings", "Lambdas"),
        (EdgeKind.CROSS_REFERENCE, "1-strings", "Streams"),
    ]


def test_ambiguous_title_is_fatal_and_adds_nothing() -> None:
    """It should list every candidate and leave the graph without new edges."""

    graph = build_graph(
        [
            ChapterStart(title="Strings"),
            SectionStart(title="Overview"),
            TopicItem(text="Immutability"),
            ChapterStart(title="Collections"),
            SectionStart(title="Overview"),
            TopicItem(text="See also Overview"),
        ]
    )

    with pytest.raises(AmbiguousReferenceError) as exc:
        resolve_references(graph)

    assert exc.value.candidates == ["1-strings.1-overview", "2-collections.1-overview"]
    assert exc.value.stage == "resolve"
    assert graph.edges() == []


def test_resolution_does_not_touch_titles_or_text(three_chapter_events: list) -> None:
    """It should only append edges."""

    graph = build_graph(three_chapter_events)
    before = [(n.id, n.title, n.text) for n in graph]

    resolve_references(graph)

    assert [(n.id, n.title, n.text) for n in graph] == before
