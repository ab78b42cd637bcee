"""Segment classifier: split a reply buffer into plain-text and code segments.

Full segmentation of a complete buffer on the triple-backtick fence. Used by
the incremental parser whenever a cheap append is not safe.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

FENCE = "```"


class SegmentKind(StrEnum):
    """Kinds of rendered segments."""

    TEXT = "text"
    CODE = "code"


@dataclass(frozen=True)
class Segment:
    """One renderable piece of an assistant reply.

    Attributes:
        kind: Plain text or fenced code.
        content: Segment text (language tag already stripped for code).
        language: Language label of a code segment, if the fence named one.
    """

    kind: SegmentKind
    content: str
    language: str | None = None

    @property
    def is_code(self) -> bool:
        return self.kind is SegmentKind.CODE

    def extended(self, chunk: str) -> Segment:
        """Return a copy with ``chunk`` appended to the content."""
        return Segment(kind=self.kind, content=self.content + chunk, language=self.language)


def is_inside_fence(text: str) -> bool:
    """True when ``text`` ends inside an unterminated fence."""
    return text.count(FENCE) % 2 == 1


def _code_segment(component: str) -> Segment:
    """Build a code segment, treating the first line as the language tag.

    A component without a newline (a one-line fence, or an info line still
    streaming) is both the language tag and the content.
    """
    if "\n" not in component:
        language = component.strip()
        return Segment(kind=SegmentKind.CODE, content=component, language=language or None)

    first_line, code = component.split("\n", 1)
    language = first_line.strip()
    return Segment(kind=SegmentKind.CODE, content=code, language=language or None)


def classify_segments(text: str) -> list[Segment]:
    """Split ``text`` into alternating plain/code segments.

    Components at odd split indexes sit inside a fence. When the fence count is
    odd the split count is even, so the trailing component is odd-indexed and
    belongs to an unterminated block: it renders as code while streaming.

    Args:
        text: The complete buffer to segment.

    Returns:
        Segments in source order; empty components are dropped.
    """
    components = text.split(FENCE)
    segments: list[Segment] = []

    for index, component in enumerate(components):
        if not component:
            continue
        if index % 2 == 1:
            segments.append(_code_segment(component))
        else:
            segments.append(Segment(kind=SegmentKind.TEXT, content=component))

    return segments
