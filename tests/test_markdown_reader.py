"""Tests for the Markdown event reader."""

from __future__ import annotations

from pathlib import Path

import pytest

from contentgraph.models.source import ChapterStart, Paragraph, SectionStart, TopicItem
from contentgraph.sources.markdown import MarkdownEventReader


def test_handbook_events_at_chapter_level_two(handbook_path: Path) -> None:
    """It should map ##/###/bullets to chapter/section/topic and skip the title."""

    events = list(MarkdownEventReader.from_path(handbook_path, chapter_level=2))

    assert [(e.kind, getattr(e, "title", None) or e.text) for e in events] == [
        ("paragraph", "Revise the last-minute sections in each chapter."),
        ("chapter", "Table of Contents"),
        ("topic", "[Strings](#strings)"),
        ("topic", "[Collections](#collections)"),
        ("chapter", "Strings"),
        ("section", "String Basics"),
        ("topic", "Immutability"),
        ("topic", "String pool"),
        ("section", "Last-minute revision"),
        ("topic", "equals vs == (see also Immutability)"),
        ("chapter", "Collections"),
        ("paragraph", "Before Collections go through Strings."),
        ("section", "Lists"),
        ("paragraph", "Requires String Basics."),
        ("topic", "ArrayList vs LinkedList"),
        ("chapter", "Concurrency"),
        ("topic", "Threads"),
    ]
    assert events[1] == ChapterStart(title="Table of Contents", line=5)


def test_reader_is_restartable() -> None:
    """It should yield the same events on every iteration."""

    reader = MarkdownEventReader("# A\n\n- one\n")

    assert list(reader) == list(reader)


def test_numbers_and_deeper_headings() -> None:
    """It should keep declared numbers and turn deeper headings into topics."""

    text = "# 2. Strings\n## 1) Basics\n#### Pool\n3. Interning\n"

    assert list(MarkdownEventReader(text)) == [
        ChapterStart(title="Strings", number=2, line=1),
        SectionStart(title="Basics", number=1, line=2),
        TopicItem(text="Pool", line=3),
        TopicItem(text="Interning", number=3, line=4),
    ]


def test_trailing_hash_in_title_is_kept() -> None:
    """It should strip only a space-separated closing sequence from headings."""

    text = "# C#\n## F# basics\n## Closing ##\n"

    assert [e.title for e in MarkdownEventReader(text)] == ["C#", "F# basics", "Closing"]


def test_code_fences_and_rules_are_skipped() -> None:
    """It should ignore fenced code and horizontal rules."""

    text = "# Strings\n```java\n# not a heading\n- not a bullet\n```\n---\nString text.\n"

    assert list(MarkdownEventReader(text)) == [
        ChapterStart(title="Strings", line=1),
        Paragraph(text="String text.", line=7),
    ]


def test_invalid_chapter_level_is_rejected() -> None:
    """It should refuse chapter levels outside 1..5."""

    with pytest.raises(ValueError):
        MarkdownEventReader("", chapter_level=6)
