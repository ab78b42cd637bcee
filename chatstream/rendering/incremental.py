"""Incremental parser: re-segment a growing reply buffer cheaply.

The parser keeps the last buffer and its segments. When the new chunk cannot
change the structure it is appended to the trailing segment; otherwise the
whole buffer is segmented again.
"""

from __future__ import annotations

import logging

from chatstream.rendering.segments import (
    FENCE,
    Segment,
    SegmentKind,
    classify_segments,
    is_inside_fence,
)

logger = logging.getLogger(__name__)

# Markers that can change segment structure (or will once markdown rendering
# kicks in downstream): fences, headings, lists/emphasis, links, tables,
# blockquotes and paragraph breaks.
STRUCTURAL_TRIGGERS = ("```", "#", "*", "-", "[", "|", ">", "\n\n")

# Tail of the previous buffer checked together with the new chunk, so a marker
# split across two chunks is still seen.
LOOKBEHIND_CHARS = 10


class IncrementalParser:
    """Parse state for one streamed response.

    ``parse`` is referentially stable: an unchanged buffer returns the cached
    segment list object itself. Segments produced before an incremental append
    are kept as the same objects; only the trailing one is replaced.
    """

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Clear all cached state before a fresh response starts rendering."""
        self._last_text = ""
        self._segments: list[Segment] = []
        self._inside_fence = False
        self._info_line_open = False
        self.full_parses = 0
        self.incremental_appends = 0

    @property
    def segments(self) -> list[Segment]:
        """Segments produced by the most recent parse."""
        return self._segments

    @property
    def last_text(self) -> str:
        return self._last_text

    def parse(self, text: str, is_final: bool = False) -> list[Segment]:
        """Return the segments for ``text``.

        Args:
            text: The whole buffer so far (not just the new chunk).
            is_final: The response is complete; forces a full segmentation.

        Returns:
            The segment list. Callers must not mutate it.
        """
        if text == self._last_text and not is_final:
            return self._segments

        if is_final or not text.startswith(self._last_text):
            return self._full_parse(text)

        chunk = text[len(self._last_text) :]
        if self._needs_full_reparse(chunk):
            return self._full_parse(text)

        return self._append(text, chunk)

    def _needs_full_reparse(self, chunk: str) -> bool:
        window = self._last_text[-LOOKBEHIND_CHARS:] + chunk
        if any(trigger in window for trigger in STRUCTURAL_TRIGGERS):
            return True
        # The language tag of an open fence is still being written
        return self._inside_fence and self._info_line_open

    def _full_parse(self, text: str) -> list[Segment]:
        self._segments = classify_segments(text)
        self._last_text = text
        self._inside_fence = is_inside_fence(text)
        self._info_line_open = self._inside_fence and "\n" not in text.rsplit(FENCE, 1)[-1]
        self.full_parses += 1
        return self._segments

    def _append(self, text: str, chunk: str) -> list[Segment]:
        kind = SegmentKind.CODE if self._inside_fence else SegmentKind.TEXT
        segments = list(self._segments)

        if segments and segments[-1].kind is kind:
            segments[-1] = segments[-1].extended(chunk)
        else:
            logger.debug("Starting new %s segment on incremental append", kind)
            segments.append(Segment(kind=kind, content=chunk))

        self._segments = segments
        self._last_text = text
        self.incremental_appends += 1
        return segments
