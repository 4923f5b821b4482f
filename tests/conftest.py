"""Shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from contentgraph.models.graph import Edge, EdgeKind, Graph, Node, NodeKind
from contentgraph.models.source import ChapterStart, Paragraph, SectionStart, TopicItem

HANDBOOK_MD = """\
# Java Interview Handbook

Revise the last-minute sections in each chapter.

## Table of Contents

- [Strings](#strings)
- [Collections](#collections)

## Strings

### String Basics

- Immutability
- String pool

### Last-minute revision

- equals vs == (see also Immutability)

## Collections

Before Collections go through Strings.

### Lists

Requires String Basics.

- ArrayList vs LinkedList

## Concurrency

- Threads
"""


def make_chain_graph(
    ids: list[str],
    prerequisites: list[tuple[str, str]] = (),  # type: ignore[assignment]
    ordinals: list[int] | None = None,
) -> Graph:
    """Flat graph of chapters with `(dependent, prerequisite)` edges."""

    graph = Graph()
    for i, node_id in enumerate(ids):
        graph.add_node(
            Node(
                id=node_id,
                title=node_id.upper(),
                kind=NodeKind.CHAPTER,
                depth=0,
                ordinal=ordinals[i] if ordinals else i + 1,
            )
        )
    for source, target in prerequisites:
        graph.add_edge(Edge(kind=EdgeKind.PREREQUISITE, source=source, target=target))
    return graph


@pytest.fixture
def handbook_path(tmp_path: Path) -> Path:
    path = tmp_path / "handbook.md"
    path.write_text(HANDBOOK_MD, encoding="utf-8")
    return path


@pytest.fixture
def three_chapter_events() -> list:
    """Strings / Collections / Concurrency, where Lists requires String Basics."""

    return [
        ChapterStart(title="Strings"),
        SectionStart(title="String Basics"),
        TopicItem(text="Concatenation"),
        ChapterStart(title="Collections"),
        SectionStart(title="Lists"),
        Paragraph(text="Requires String Basics."),
        TopicItem(text="ArrayList"),
        ChapterStart(title="Concurrency"),
        SectionStart(title="Threads"),
    ]
