"""Streaming conversation orchestrator.

Drives one conversation against a provider stream:
1. Append the user message and an "awaiting first token" display entry
2. Resolve tools, open the stream, consume events in order
3. On a ``tool_calls`` outcome execute the calls in slot order, append the
   results and open the next turn
4. Stop on any other outcome, a failure, cancellation, or the turn limit

One asyncio task per conversation is the only writer of its state.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chatstream.conversation import ConversationState, invocation_parts
from chatstream.exceptions import (
    ChatStreamError,
    ConversationBusyError,
    ProviderUnavailable,
    StreamTransportError,
    TurnLimitExceeded,
)
from chatstream.rendering import IncrementalParser
from chatstream.streaming import (
    CONTENT_DELTA,
    OUTCOME_TOOL_CALLS,
    TERMINAL,
    TOOL_CALL_DELTA,
    TOOL_FAILURE_MARKER,
    StreamAccumulator,
    dispatch_tool_calls,
)
from chatstream.streaming.dispatcher import TOOL_END, TOOL_SKIPPED, TOOL_START
from chatstream.tools import ToolCatalog

if TYPE_CHECKING:
    from collections.abc import Collection

    from chatstream.conversation import DisplayMessage, Message, ToolInvocationPart
    from chatstream.interfaces import StreamClient, ToolDescriptor, ToolExecutor, ToolProvider
    from chatstream.rendering import Segment
    from chatstream.tools import ToolHandle

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOOL_TURNS = 10


@dataclass
class TurnResult:
    """Outcome of one provider turn."""

    outcome: str
    content: str = ""
    invocations: list[ToolInvocationPart] = field(default_factory=list)


class StreamingConversationOrchestrator:
    """Owns the history of one conversation and the task that extends it.

    The presentation layer observes ``display_messages``, ``is_processing``
    and ``error_message``; nothing else is exposed for rendering.
    """

    def __init__(
        self,
        stream_client: StreamClient,
        tool_provider: ToolProvider | None = None,
        tool_executor: ToolExecutor | None = None,
        *,
        catalog: ToolCatalog | None = None,
        state: ConversationState | None = None,
        parser: IncrementalParser | None = None,
        excluded_tools: Collection[str] = (),
        max_tool_turns: int = DEFAULT_MAX_TOOL_TURNS,
        turn_timeout: float | None = None,
        tool_timeout: float | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            stream_client: Capability opening provider streams.
            tool_provider: Capability listing tools (ignored when ``catalog``
                is given).
            tool_executor: Capability running tools; defaults to the provider.
            catalog: Pre-built tool catalog.
            state: Pre-built conversation state.
            parser: Incremental parser for the streamed reply.
            excluded_tools: Tool names never offered to the provider.
            max_tool_turns: Provider turns allowed per ``send``.
            turn_timeout: Wall-clock budget in seconds per ``send``.
            tool_timeout: Per-call tool timeout in seconds.
        """
        if max_tool_turns < 1:
            raise ValueError("max_tool_turns must be at least 1")
        self._stream_client = stream_client
        self._catalog = catalog or ToolCatalog(tool_provider, tool_executor)
        self._state = state or ConversationState()
        self._parser = parser or IncrementalParser()
        self._excluded_tools = frozenset(excluded_tools)
        self._max_tool_turns = max_tool_turns
        self._turn_timeout = turn_timeout
        self._tool_timeout = tool_timeout

        self._task: asyncio.Task[None] | None = None
        self._in_flight: DisplayMessage | None = None
        self._is_loading = False
        self._turns_run = 0
        self.error_message = ""
        self.last_error: Exception | None = None

    # ------------------------------------------------------------------
    # Display sink
    # ------------------------------------------------------------------

    @property
    def display_messages(self) -> tuple[DisplayMessage, ...]:
        return self._state.display_messages

    @property
    def history(self) -> tuple[Message, ...]:
        return self._state.messages

    @property
    def is_processing(self) -> bool:
        """True while a unit of work is running."""
        return self._is_loading

    @property
    def segments(self) -> list[Segment]:
        """Latest parsed segments of the streaming reply."""
        return self._parser.segments

    @property
    def catalog(self) -> ToolCatalog:
        return self._catalog

    @property
    def state(self) -> ConversationState:
        return self._state

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def send(self, user_text: str) -> asyncio.Task[None]:
        """Send a user message and start the response task.

        Must be called from a running event loop.

        Raises:
            ConversationBusyError: A previous send is still running.
        """
        if self._task is not None and not self._task.done():
            raise ConversationBusyError("A response is already in progress")

        self.error_message = ""
        self.last_error = None
        self._state.answer_pending_calls(TOOL_FAILURE_MARKER)
        self._state.append_user(user_text)
        self._in_flight = self._state.begin_response_placeholder()
        self._is_loading = True

        self._task = asyncio.get_running_loop().create_task(self._process(self._in_flight))
        return self._task

    def stop(self) -> None:
        """Cancel the active task; the in-flight entry keeps its partial text."""
        if self._task is not None and not self._task.done():
            logger.info("Stopping active response")
            self._task.cancel()
        self._task = None
        self._is_loading = False

    def clear(self) -> None:
        """Cancel any active work and wipe the conversation."""
        self.stop()
        self._state.clear()
        self._parser.reset()
        self._in_flight = None
        self.error_message = ""
        self.last_error = None

    def update_tool_provider(
        self,
        provider: ToolProvider | None,
        executor: ToolExecutor | None = None,
    ) -> ToolHandle:
        """Swap the tool capability; the running turn keeps its captured handle."""
        logger.info("Tool provider updated; invalidating tools cache")
        return self._catalog.swap_provider(provider, executor)

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    async def _process(self, entry: DisplayMessage) -> None:
        started = time.monotonic()
        self._turns_run = 0
        try:
            if self._turn_timeout is None:
                await self.run_turns(entry)
            else:
                try:
                    async with asyncio.timeout(self._turn_timeout):
                        await self.run_turns(entry)
                except TimeoutError as e:
                    raise TurnLimitExceeded(
                        f"Response exceeded {self._turn_timeout}s",
                        turns=self._turns_run,
                    ) from e
            logger.info("Message processing completed in %.2fs", time.monotonic() - started)
        except asyncio.CancelledError:
            logger.info("Message processing cancelled after %.2fs", time.monotonic() - started)
            raise
        except Exception as e:
            logger.exception("Message processing failed after %.2fs", time.monotonic() - started)
            self.error_message = str(e)
            self.last_error = e
            if self._in_flight is entry:
                self._state.fail_in_flight(f"Sorry, there was an error: {e}")
        finally:
            if self._in_flight is entry:
                self._in_flight = None
            # A later send() owns the state once stop() has handed it over
            if self._task is None or self._task is asyncio.current_task():
                self._state.answer_pending_calls(TOOL_FAILURE_MARKER)
                self._is_loading = False

    async def run_turns(self, entry: DisplayMessage) -> None:
        """Run provider turns until one ends without tool calls.

        Raises:
            TurnLimitExceeded: More than ``max_tool_turns`` turns were needed.
            ProviderUnavailable: Tools or the stream could not be obtained.
            StreamTransportError: A stream ended abnormally.
        """
        turn = 0
        while True:
            turn += 1
            if turn > self._max_tool_turns:
                raise TurnLimitExceeded(
                    f"Tool loop exceeded {self._max_tool_turns} turns",
                    turns=turn - 1,
                )
            self._turns_run = turn

            handle = self._catalog.handle
            tools = await self._resolve_tools()
            result = await self._stream_turn(entry, tools, turn)

            if result.outcome != OUTCOME_TOOL_CALLS or not result.invocations:
                if result.outcome == OUTCOME_TOOL_CALLS:
                    logger.warning("Stream finished with tool_calls but no tool calls were accumulated")
                self._state.append_assistant(result.content)
                self._state.finalize_in_flight()
                return

            self._state.append_assistant(invocation_parts(result.content, result.invocations))
            await self._run_tool_calls(result.invocations, handle)

    async def _resolve_tools(self) -> list[ToolDescriptor]:
        tools = await self._catalog.get_tools()
        if self._excluded_tools:
            tools = [tool for tool in tools if tool.name not in self._excluded_tools]
        return tools

    async def _stream_turn(self, entry: DisplayMessage, tools: list[ToolDescriptor], turn: int) -> TurnResult:
        """Consume one provider stream into a ``TurnResult``."""
        self._parser.reset()
        accumulator = StreamAccumulator()
        started = time.monotonic()
        first_token_at: float | None = None

        try:
            stream = await self._stream_client.open_stream(self._state.messages, tools)
        except ChatStreamError:
            raise
        except Exception as e:
            raise ProviderUnavailable(f"Could not open stream: {type(e).__name__}: {e}") from e

        try:
            async for event in stream:
                if first_token_at is None:
                    first_token_at = time.monotonic()
                    logger.info("Turn %d: first event after %.2fs", turn, first_token_at - started)

                event_type = event["type"]
                if event_type == CONTENT_DELTA:
                    text = accumulator.add_content(event.get("content") or "")
                    self._state.update_in_flight(text, self._parser.parse(text))
                elif event_type == TOOL_CALL_DELTA:
                    accumulator.add_tool_call_delta(
                        event["index"],
                        event.get("arguments"),
                        call_id=event.get("call_id"),
                        name=event.get("name"),
                    )
                elif event_type == TERMINAL:
                    return self._finish_turn(entry, accumulator, event)
                else:
                    logger.debug("Ignoring stream event of type %s", event_type)

                # Cancellation point between events
                await asyncio.sleep(0)
        except (asyncio.CancelledError, ChatStreamError):
            raise
        except Exception as e:
            raise StreamTransportError(f"Stream interrupted: {type(e).__name__}: {e}") from e
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

        raise StreamTransportError("Stream ended without completion")

    def _finish_turn(self, entry: DisplayMessage, accumulator: StreamAccumulator, event: dict) -> TurnResult:
        outcome = event.get("outcome") or "stop"
        content = accumulator.text or (event.get("content") or "")
        logger.info("Stream finished with reason: %s", outcome)

        if outcome == OUTCOME_TOOL_CALLS and accumulator.has_tool_calls:
            return TurnResult(outcome=outcome, content=content, invocations=accumulator.freeze())

        if content and self._state.in_flight is entry:
            self._state.update_in_flight(content, self._parser.parse(content, is_final=True))
        return TurnResult(outcome=outcome, content=content)

    async def _run_tool_calls(self, invocations: list[ToolInvocationPart], handle: ToolHandle) -> None:
        """Execute the calls of one turn in slot order, recording each result."""
        logger.info("Processing %d tool calls", len(invocations))
        async for event in dispatch_tool_calls(
            invocations=invocations,
            executor=handle.executor,
            timeout=self._tool_timeout,
        ):
            name = event.get("name") or "(unnamed)"
            if event["type"] == TOOL_SKIPPED:
                self._notify(f"Could not parse arguments for tool {name}.")
                self._state.append_tool_result(event["call_id"], f"Error: {event['content']}")
            elif event["type"] == TOOL_START:
                logger.info("Tool use detected - Name: %s, ID: %s", name, event["call_id"])
                self._notify(f"Using tool: {name}...")
            elif event["type"] == TOOL_END:
                if event["failed"]:
                    self._notify(f"There was an error using the tool {name}.")
                self._state.append_tool_result(event["call_id"], event["result"])

    def _notify(self, notice: str) -> None:
        if self._state.in_flight is not None:
            self._state.append_in_flight_notice(notice)
