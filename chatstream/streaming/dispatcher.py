"""Tool dispatcher: execute the tool calls of one turn, strictly in order.

Calls run one at a time in slot order so tool results land in the history in
the same order as their invocations, whatever the individual latencies.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

from chatstream.exceptions import ArgumentParseError, ToolExecutionFailure
from chatstream.streaming.events import StreamEvent
from chatstream.streaming.parser import parse_tool_call

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Sequence

    from chatstream.conversation.messages import ToolInvocationPart
    from chatstream.interfaces import ToolExecutor

logger = logging.getLogger(__name__)

# Tool-result content recorded when the executor produced nothing
TOOL_FAILURE_MARKER = "Error: Tool execution failed"

TOOL_START = "tool_start"
TOOL_END = "tool_end"
TOOL_SKIPPED = "tool_skipped"


async def dispatch_tool_calls(
    *,
    invocations: Sequence[ToolInvocationPart],
    executor: ToolExecutor | None,
    timeout: float | None = None,
) -> AsyncGenerator[StreamEvent, None]:
    """Execute frozen tool invocations, yielding progress events.

    For each invocation, in order:
    - Malformed arguments yield ``tool_skipped`` with the parse error and the
      call is not executed.
    - Otherwise ``tool_start`` is yielded, the executor is awaited, and
      ``tool_end`` carries ``result`` (the tool text or ``TOOL_FAILURE_MARKER``)
      and ``failed``.

    The consumer must record each result before pulling the next event; the
    next call only starts once it does.

    Args:
        invocations: Tool invocations in slot-index order.
        executor: Capability executing tools (``None`` fails every call).
        timeout: Per-call timeout in seconds.

    Yields:
        StreamEvent dicts.
    """
    for invocation in invocations:
        try:
            call = parse_tool_call(invocation)
        except ArgumentParseError as e:
            logger.warning(
                "Skipping tool call '%s': %s. Raw args: %s",
                e.tool_name or "(unnamed)",
                e,
                e.raw_arguments[:200] if e.raw_arguments else "(empty)",
            )
            yield StreamEvent(
                type=TOOL_SKIPPED,
                call_id=invocation.call_id,
                name=invocation.name,
                content=str(e),
            )
            continue

        yield StreamEvent(type=TOOL_START, call_id=call.id, name=call.name, arguments=str(call.args)[:200])

        try:
            result = await _execute_single_tool(
                executor=executor,
                call_id=call.id,
                tool_name=call.name,
                args=call.args,
                timeout=timeout,
            )
        except ToolExecutionFailure as e:
            logger.warning("Tool call %s failed (%s): %s", call.name, e.correlation_id, e)
            yield StreamEvent(
                type=TOOL_END,
                call_id=call.id,
                name=call.name,
                result=TOOL_FAILURE_MARKER,
                failed=True,
            )
            continue

        yield StreamEvent(type=TOOL_END, call_id=call.id, name=call.name, result=result, failed=False)


async def _execute_single_tool(
    *,
    executor: ToolExecutor | None,
    call_id: str,
    tool_name: str,
    args: dict[str, Any],
    timeout: float | None,
) -> str:
    """Invoke one tool.

    Raises:
        ToolExecutionFailure: No executor, timeout, executor exception, or a
            ``None`` result.
    """
    if executor is None:
        raise ToolExecutionFailure("No tool executor configured", tool_name=tool_name, call_id=call_id)

    started = time.monotonic()
    try:
        result = await asyncio.wait_for(executor.invoke(tool_name, args), timeout=timeout)
    except TimeoutError as e:
        raise ToolExecutionFailure(
            f"Timed out after {timeout}s", tool_name=tool_name, call_id=call_id
        ) from e
    except Exception as e:
        logger.exception("Tool %s raised", tool_name)
        raise ToolExecutionFailure(
            f"{type(e).__name__}: {e}", tool_name=tool_name, call_id=call_id
        ) from e

    if result is None:
        raise ToolExecutionFailure("Executor returned no result", tool_name=tool_name, call_id=call_id)

    logger.info("Tool %s finished in %.2fs", tool_name, time.monotonic() - started)
    return str(result)
