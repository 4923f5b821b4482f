"""Document readers producing source events."""

from __future__ import annotations

from contentgraph.sources.markdown import MarkdownEventReader

__all__ = ["MarkdownEventReader"]
