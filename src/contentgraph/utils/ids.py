"""ID utilities."""

from __future__ import annotations

import re
import unicodedata
from typing import Container

_NON_WORD_RE = re.compile(r"[^a-z0-9]+")
_LEADING_ORDINAL_RE = re.compile(r"^\d+(?:\s+|$)")


def slugify(text: str, *, max_length: int = 48) -> str:
    """Lowercase ASCII slug with `-` separators, cut at a word boundary.

    Falls back to `node` when nothing printable is left (e.g. a title made of symbols).
    """

    folded = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = _NON_WORD_RE.sub("-", folded.lower()).strip("-")
    if len(slug) > max_length:
        cut = slug[:max_length]
        slug = cut.rsplit("-", 1)[0] if "-" in cut else cut
    return slug or "node"


def format_node_id(parent_id: str | None, ordinal: int, title: str) -> str:
    """Format a path-like node id, e.g. `2-collections.1-lists`."""

    segment = f"{ordinal}-{slugify(title)}"
    if parent_id is None:
        return segment
    return f"{parent_id}.{segment}"


def disambiguate(candidate: str, taken: Container[str]) -> str:
    """Return `candidate`, or `candidate-2`, `candidate-3`, ... whichever is free."""

    if candidate not in taken:
        return candidate
    n = 2
    while f"{candidate}-{n}" in taken:
        n += 1
    return f"{candidate}-{n}"


def normalize_title(text: str) -> str:
    """Case- and punctuation-insensitive form used for title matching."""

    return " ".join(_NON_WORD_RE.sub(" ", text.lower()).split())


def strip_leading_ordinal(normalized: str) -> str:
    """Drop a leading `3 ` from an already normalized title or anchor."""

    return _LEADING_ORDINAL_RE.sub("", normalized, count=1)
