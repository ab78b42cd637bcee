"""Tool call parser: decode frozen invocations into typed calls.

Pure-function JSON decoding of the argument text accumulated during the
stream. An empty argument string means "no arguments".
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from chatstream.conversation.messages import ToolInvocationPart
from chatstream.exceptions import ArgumentParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedToolCall:
    """A parsed and validated tool call.

    Attributes:
        id: Tool call ID linking the result back to the invocation.
        name: Tool function name.
        args: JSON-decoded arguments object.
    """

    id: str
    name: str
    args: dict[str, Any]


def parse_tool_call(invocation: ToolInvocationPart) -> ParsedToolCall:
    """Decode one invocation's argument text.

    Args:
        invocation: Frozen tool invocation from the accumulator.

    Returns:
        The parsed call.

    Raises:
        ArgumentParseError: If the name is empty (truncated output) or the
            arguments are not a well-formed JSON object.
    """
    raw = invocation.arguments
    if not invocation.name:
        raise ArgumentParseError(
            "Tool call has no name (likely truncated LLM output)",
            tool_name="",
            raw_arguments=raw,
        )

    if not raw.strip():
        return ParsedToolCall(id=invocation.call_id, name=invocation.name, args={})

    try:
        args = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ArgumentParseError(
            f"Arguments for tool '{invocation.name}' are not valid JSON: {e.msg}",
            tool_name=invocation.name,
            raw_arguments=raw,
        ) from e

    if not isinstance(args, dict):
        raise ArgumentParseError(
            f"Arguments for tool '{invocation.name}' must be a JSON object, got {type(args).__name__}",
            tool_name=invocation.name,
            raw_arguments=raw,
        )

    return ParsedToolCall(id=invocation.call_id, name=invocation.name, args=args)
