"""Reference extraction from node prose.

Recognized forms:

- `[label](#anchor)`: explicit link, as found in a table of contents.
- `see also X, Y`: cross-reference.
- `requires X, Y` / `prerequisite: X`: the enclosing node requires X and Y.
- `before X go through Y`: X requires Y (also `read`, `study`, `revise`, `cover`, `finish`).

Lists of targets are comma separated.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from contentgraph.models.graph import EdgeKind

_LINK_RE = re.compile(r"\[(?P<label>[^\]]+)\]\(#(?P<target>[^)\s]+)\)")
# A "." ends a phrase only when followed by whitespace or the end, so dotted ids survive.
_TARGETS = r"(?P<targets>(?:[^.;)\n]|\.(?=\S))+)"
_SEE_ALSO_RE = re.compile(r"\bsee\s+also\b[:\s]*" + _TARGETS, re.IGNORECASE)
_REQUIRES_RE = re.compile(
    r"\b(?:requires|prerequisites?)\b\s*:?\s*" + _TARGETS,
    re.IGNORECASE,
)
_BEFORE_RE = re.compile(
    r"\bbefore\s+(?P<dependent>(?:[^,;.\n]|\.(?=\S))+?)\s*,?\s+"
    r"(?:go\s+through|read|study|revise|cover|finish)\s+" + _TARGETS,
    re.IGNORECASE,
)
_STRIP_CHARS = " \t`'\"*_"


@dataclass(frozen=True)
class RawReference:
    """A reference found in text, not yet resolved against a graph.

    `dependent` is set only for `before X go through Y` phrases, where the requiring node
    is named in the text rather than being the node that carries it.
    """

    kind: EdgeKind
    target: str
    raw: str
    dependent: str | None = None


def extract_references(text: str) -> list[RawReference]:
    """Extract references without duplicates.

    Explicit links come first, then phrase references in order of appearance. Links
    embedded in a phrase (`see also [Strings](#3-strings)`) contribute their anchor.

    Args:
        text: Title and prose of a node.

    Returns:
        Unresolved references.
    """

    refs: list[RawReference] = []
    for m in _LINK_RE.finditer(text):
        refs.append(RawReference(EdgeKind.CROSS_REFERENCE, m.group("target"), m.group(0)))

    plain = _LINK_RE.sub(lambda m: m.group("target"), text)
    phrases: list[tuple[int, RawReference]] = []
    for m in _SEE_ALSO_RE.finditer(plain):
        for target in _split_targets(m.group("targets")):
            phrases.append((m.start(), RawReference(EdgeKind.CROSS_REFERENCE, target, m.group(0).strip())))

    for m in _BEFORE_RE.finditer(plain):
        dependent = _clean(m.group("dependent")) or None
        for target in _split_targets(m.group("targets")):
            phrases.append((m.start(), RawReference(EdgeKind.PREREQUISITE, target, m.group(0).strip(), dependent)))

    for m in _REQUIRES_RE.finditer(plain):
        for target in _split_targets(m.group("targets")):
            phrases.append((m.start(), RawReference(EdgeKind.PREREQUISITE, target, m.group(0).strip())))

    phrases.sort(key=lambda item: item[0])
    refs.extend(ref for _pos, ref in phrases)

    # De-duplicate while keeping order
    seen: set[tuple[EdgeKind, str, str | None]] = set()
    out: list[RawReference] = []
    for ref in refs:
        key = (ref.kind, ref.target, ref.dependent)
        if key not in seen:
            out.append(ref)
            seen.add(key)
    return out


def _split_targets(raw: str) -> list[str]:
    parts = [_clean(p) for p in raw.split(",")]
    return [p for p in parts if p]


def _clean(text: str) -> str:
    return text.strip(_STRIP_CHARS)
