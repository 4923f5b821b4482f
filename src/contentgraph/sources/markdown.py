"""Markdown event reader.

A thin line-oriented reader that flattens a Markdown handbook into source events. It does
no structural checking of its own; that is the builder's job.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator

from contentgraph.logging import get_logger
from contentgraph.models.source import ChapterStart, Paragraph, SectionStart, SourceEvent, TopicItem

logger = get_logger(__name__)

_HEADING_RE = re.compile(r"^(?P<hashes>#{1,6})\s+(?P<title>.+?)(?:\s+#+)?\s*$")
_LIST_RE = re.compile(r"^\s*(?:[-*+]|(?P<num>\d+)[.)])\s+(?P<text>.+?)\s*$")
_NUMBERED_TITLE_RE = re.compile(r"^(?P<num>\d+)[.)]\s+(?P<title>.+)$")
_FENCE_RE = re.compile(r"^\s*(```|~~~)")
_RULE_RE = re.compile(r"^\s*([-*_])(\s*\1){2,}\s*$")


class MarkdownEventReader:
    """Restartable iterable of source events over Markdown text.

    Args:
        text: Markdown source.
        chapter_level: Heading level that opens a chapter; the next level opens a section,
            deeper headings become topics, shallower ones (a document title) are skipped.
    """

    def __init__(self, text: str, *, chapter_level: int = 1) -> None:
        if not 1 <= chapter_level <= 5:
            raise ValueError("chapter_level must be between 1 and 5")
        self._text = text
        self._chapter_level = chapter_level

    @classmethod
    def from_path(cls, path: Path, *, chapter_level: int = 1) -> MarkdownEventReader:
        return cls(path.read_text(encoding="utf-8"), chapter_level=chapter_level)

    def __iter__(self) -> Iterator[SourceEvent]:
        in_fence = False
        for lineno, line in enumerate(self._text.splitlines(), start=1):
            if _FENCE_RE.match(line):
                in_fence = not in_fence
                continue
            if in_fence or not line.strip() or _RULE_RE.match(line):
                continue

            heading = _HEADING_RE.match(line)
            if heading:
                event = self._heading(len(heading.group("hashes")), heading.group("title"), lineno)
                if event is not None:
                    yield event
                continue

            item = _LIST_RE.match(line)
            if item:
                num = item.group("num")
                yield TopicItem(text=item.group("text"), number=int(num) if num else None, line=lineno)
                continue

            yield Paragraph(text=line.strip(), line=lineno)

    def _heading(self, level: int, raw_title: str, lineno: int) -> SourceEvent | None:
        number: int | None = None
        title = raw_title.strip()
        numbered = _NUMBERED_TITLE_RE.match(title)
        if numbered:
            number = int(numbered.group("num"))
            title = numbered.group("title").strip()

        if level < self._chapter_level:
            logger.debug("Skipping heading above chapter level at line %d: %s", lineno, title)
            return None
        if level == self._chapter_level:
            return ChapterStart(title=title, number=number, line=lineno)
        if level == self._chapter_level + 1:
            return SectionStart(title=title, number=number, line=lineno)
        return TopicItem(text=title, number=number, line=lineno)
