"""Source events produced by a document reader.

A reader flattens a document into heading/list/prose events; the builder turns them
back into a tree.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _SourceEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int | None = Field(default=None, ge=1)

    def describe(self) -> str:
        """Short human-readable locator used in error messages."""

        where = f"line {self.line}" if self.line is not None else "unknown line"
        return f"{self.kind} {self.label()!r} ({where})"  # type: ignore[attr-defined]

    def label(self) -> str:
        raise NotImplementedError


class ChapterStart(_SourceEvent):
    kind: Literal["chapter"] = "chapter"
    depth: Literal[0] = 0
    title: str = Field(min_length=1)
    number: int | None = Field(default=None, ge=0)

    def label(self) -> str:
        return self.title


class SectionStart(_SourceEvent):
    kind: Literal["section"] = "section"
    depth: Literal[1] = 1
    title: str = Field(min_length=1)
    number: int | None = Field(default=None, ge=0)

    def label(self) -> str:
        return self.title


class TopicItem(_SourceEvent):
    kind: Literal["topic"] = "topic"
    depth: Literal[2] = 2
    text: str = Field(min_length=1)
    number: int | None = Field(default=None, ge=0)

    def label(self) -> str:
        return self.text


class Paragraph(_SourceEvent):
    """Free prose attached to the most recently opened node."""

    kind: Literal["paragraph"] = "paragraph"
    text: str

    def label(self) -> str:
        return self.text[:40]


SourceEvent = Annotated[
    Union[ChapterStart, SectionStart, TopicItem, Paragraph],
    Field(discriminator="kind"),
]
