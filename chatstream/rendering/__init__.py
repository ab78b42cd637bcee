"""Rendering support: incremental segmentation of streamed replies."""

from chatstream.rendering.incremental import LOOKBEHIND_CHARS, STRUCTURAL_TRIGGERS, IncrementalParser
from chatstream.rendering.segments import FENCE, Segment, SegmentKind, classify_segments, is_inside_fence

__all__ = [
    "FENCE",
    "LOOKBEHIND_CHARS",
    "STRUCTURAL_TRIGGERS",
    "IncrementalParser",
    "Segment",
    "SegmentKind",
    "classify_segments",
    "is_inside_fence",
]
