"""Unit tests for sequential tool dispatch.

dispatch_tool_calls() must run calls one at a time in slot order and turn
every executor failure into the failure marker.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from chatstream.conversation import ToolInvocationPart
from chatstream.streaming import TOOL_FAILURE_MARKER, dispatch_tool_calls
from tests.helpers.streams import FakeToolProvider


async def _collect(invocations, executor, timeout=None):
    return [
        dict(event)
        async for event in dispatch_tool_calls(invocations=invocations, executor=executor, timeout=timeout)
    ]


class TestDispatchToolCalls:
    @pytest.mark.asyncio
    async def test_start_then_end_with_result(self):
        executor = FakeToolProvider(results={"list_files": "a.txt\nb.txt"})
        invocations = [ToolInvocationPart(call_id="c1", name="list_files", arguments='{"path": "."}')]

        events = await _collect(invocations, executor)

        assert [e["type"] for e in events] == ["tool_start", "tool_end"]
        assert events[1]["result"] == "a.txt\nb.txt"
        assert events[1]["failed"] is False
        assert executor.invocations == [("list_files", {"path": "."})]

    @pytest.mark.asyncio
    async def test_none_result_becomes_failure_marker(self):
        executor = FakeToolProvider(results={"delete_repo": None})
        invocations = [ToolInvocationPart(call_id="c1", name="delete_repo", arguments="{}")]

        events = await _collect(invocations, executor)

        assert events[-1]["result"] == TOOL_FAILURE_MARKER
        assert events[-1]["failed"] is True

    @pytest.mark.asyncio
    async def test_executor_exception_becomes_failure_marker(self):
        executor = AsyncMock()
        executor.invoke.side_effect = RuntimeError("pipe closed")
        invocations = [ToolInvocationPart(call_id="c1", name="x", arguments="{}")]

        events = await _collect(invocations, executor)

        assert events[-1]["result"] == TOOL_FAILURE_MARKER

    @pytest.mark.asyncio
    async def test_timeout_becomes_failure_marker(self):
        executor = FakeToolProvider(delays={"slow": 1.0})
        invocations = [ToolInvocationPart(call_id="c1", name="slow", arguments="{}")]

        events = await _collect(invocations, executor, timeout=0.01)

        assert events[-1]["failed"] is True

    @pytest.mark.asyncio
    async def test_no_executor_fails_every_call(self):
        invocations = [ToolInvocationPart(call_id="c1", name="x", arguments="{}")]
        events = await _collect(invocations, None)
        assert events[-1]["result"] == TOOL_FAILURE_MARKER

    @pytest.mark.asyncio
    async def test_malformed_arguments_are_skipped(self):
        executor = FakeToolProvider()
        invocations = [
            ToolInvocationPart(call_id="c1", name="broken", arguments='{"a": '),
            ToolInvocationPart(call_id="c2", name="fine", arguments="{}"),
        ]

        events = await _collect(invocations, executor)

        assert [e["type"] for e in events] == ["tool_skipped", "tool_start", "tool_end"]
        assert events[0]["call_id"] == "c1"
        assert "not valid JSON" in events[0]["content"]
        assert executor.invocations == [("fine", {})]

    @pytest.mark.asyncio
    async def test_calls_run_sequentially_in_order(self):
        executor = FakeToolProvider(delays={"slow": 0.05, "fast": 0.0})
        invocations = [
            ToolInvocationPart(call_id="c1", name="slow", arguments="{}"),
            ToolInvocationPart(call_id="c2", name="fast", arguments="{}"),
        ]

        ends = [e["call_id"] for e in await _collect(invocations, executor) if e["type"] == "tool_end"]

        assert ends == ["c1", "c2"]
        assert executor.completed == ["slow", "fast"]

    @pytest.mark.asyncio
    async def test_next_call_waits_for_consumer(self):
        executor = FakeToolProvider()
        invocations = [
            ToolInvocationPart(call_id="c1", name="first", arguments="{}"),
            ToolInvocationPart(call_id="c2", name="second", arguments="{}"),
        ]

        gen = dispatch_tool_calls(invocations=invocations, executor=executor)
        await gen.__anext__()  # tool_start c1
        await gen.__anext__()  # tool_end c1
        await asyncio.sleep(0)
        assert executor.completed == ["first"]
        await gen.aclose()
