"""Streaming module: components of one provider turn.

Normalized stream events, per-turn accumulation of content and tool-call
fragments, tool argument parsing, and sequential tool dispatch.
"""

from chatstream.streaming.accumulator import PartialToolCall, StreamAccumulator
from chatstream.streaming.dispatcher import TOOL_FAILURE_MARKER, dispatch_tool_calls
from chatstream.streaming.events import (
    CONTENT_DELTA,
    OUTCOME_STOP,
    OUTCOME_TOOL_CALLS,
    TERMINAL,
    TOOL_CALL_DELTA,
    StreamEvent,
    normalize_outcome,
)
from chatstream.streaming.parser import ParsedToolCall, parse_tool_call

__all__ = [
    "CONTENT_DELTA",
    "OUTCOME_STOP",
    "OUTCOME_TOOL_CALLS",
    "TERMINAL",
    "TOOL_CALL_DELTA",
    "TOOL_FAILURE_MARKER",
    "ParsedToolCall",
    "PartialToolCall",
    "StreamAccumulator",
    "StreamEvent",
    "dispatch_tool_calls",
    "normalize_outcome",
    "parse_tool_call",
]
