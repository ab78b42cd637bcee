"""Conversation state: wire history plus the display list.

The wire history is append-only. The display list mirrors it for the UI and
holds at most one in-flight entry: the assistant reply currently streaming.
The orchestrator keeps an explicit reference to that entry instead of relying
on the tail position of the list.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from chatstream.conversation.messages import (
    DisplayMessage,
    Message,
    MessagePart,
    Role,
    TextPart,
    ToolInvocationPart,
)
from chatstream.exceptions import ConversationStateError
from chatstream.rendering.segments import Segment

logger = logging.getLogger(__name__)


class ConversationState:
    """Ordered message history for one conversation."""

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._display: list[DisplayMessage] = []
        self._in_flight: DisplayMessage | None = None
        # Invocation ids issued by the assistant that still await a result
        self._pending_calls: dict[str, None] = {}
        self._answered_calls: set[str] = set()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def messages(self) -> tuple[Message, ...]:
        """Snapshot of the wire history."""
        return tuple(self._messages)

    @property
    def display_messages(self) -> tuple[DisplayMessage, ...]:
        """Snapshot of the display list (entries themselves are live)."""
        return tuple(self._display)

    @property
    def in_flight(self) -> DisplayMessage | None:
        return self._in_flight

    @property
    def pending_tool_calls(self) -> frozenset[str]:
        return frozenset(self._pending_calls)

    # ------------------------------------------------------------------
    # Wire history
    # ------------------------------------------------------------------

    def append_user(self, text: str) -> Message:
        """Append a user message to both the wire history and the display."""
        message = Message(role=Role.USER, content=text)
        self._messages.append(message)
        self._display.append(DisplayMessage(role=Role.USER, text=text))
        return message

    def append_assistant(self, content: str | Sequence[MessagePart]) -> Message:
        """Append a completed assistant message.

        Args:
            content: Reply text, or a list of parts for tool invocations.

        Raises:
            ConversationStateError: If a tool invocation id is empty or reused.
        """
        if isinstance(content, str):
            message = Message(role=Role.ASSISTANT, content=content)
        else:
            message = Message(role=Role.ASSISTANT, content=tuple(content))

        invocation_ids = [part.call_id for part in message.tool_invocations]
        for call_id in invocation_ids:
            if not call_id:
                raise ConversationStateError("Tool invocation without a call id")
            if call_id in self._pending_calls or call_id in self._answered_calls:
                raise ConversationStateError(f"Duplicate tool call id: {call_id}")
        if len(set(invocation_ids)) != len(invocation_ids):
            raise ConversationStateError("Duplicate tool call id within one message")

        self._messages.append(message)
        self._pending_calls.update(dict.fromkeys(invocation_ids))
        return message

    def append_tool_result(self, call_id: str, result_text: str) -> Message:
        """Append a tool-role message answering a prior invocation.

        Raises:
            ConversationStateError: If ``call_id`` matches no unanswered invocation.
        """
        if call_id not in self._pending_calls:
            raise ConversationStateError(f"No pending tool invocation with id {call_id!r}")

        message = Message(role=Role.TOOL, content=result_text, tool_call_id=call_id)
        self._messages.append(message)
        self._pending_calls.pop(call_id, None)
        self._answered_calls.add(call_id)
        return message

    def answer_pending_calls(self, result_text: str) -> list[Message]:
        """Answer every unanswered invocation with ``result_text``, in invocation order.

        Called when a response is aborted while tool calls it issued are still
        outstanding.
        """
        answered = [self.append_tool_result(call_id, result_text) for call_id in list(self._pending_calls)]
        if answered:
            logger.warning("Answered %d interrupted tool calls with a failure result", len(answered))
        return answered

    # ------------------------------------------------------------------
    # In-flight display entry
    # ------------------------------------------------------------------

    def begin_response_placeholder(self) -> DisplayMessage:
        """Append an "awaiting first token" assistant entry and return it.

        A previous in-flight entry (left behind by a cancelled response) is
        released as-is, so at most one exists at a time.
        """
        if self._in_flight is not None:
            logger.debug("Releasing stale in-flight entry %s", self._in_flight.id)
            self._in_flight = None

        entry = DisplayMessage(role=Role.ASSISTANT, awaiting_first_token=True)
        self._display.append(entry)
        self._in_flight = entry
        return entry

    def _require_in_flight(self) -> DisplayMessage:
        if self._in_flight is None:
            raise ConversationStateError("No in-flight response entry")
        return self._in_flight

    def update_in_flight(self, text: str, segments: list[Segment] | None = None) -> DisplayMessage:
        """Replace the in-flight entry's text in place (no history growth)."""
        entry = self._require_in_flight()
        entry.awaiting_first_token = False
        entry.text = text
        if segments is not None:
            entry.segments = segments
        return entry

    def append_in_flight_notice(self, notice: str) -> DisplayMessage:
        """Append a status notice (e.g. tool use) to the in-flight entry."""
        entry = self._require_in_flight()
        entry.awaiting_first_token = False
        entry.text += notice
        return entry

    def fail_in_flight(self, error_text: str) -> DisplayMessage | None:
        """Show a user-visible error in the in-flight entry and finalize it."""
        entry = self._in_flight
        if entry is None:
            return None
        entry.awaiting_first_token = False
        entry.is_error = True
        entry.text = error_text
        entry.segments = []
        self.finalize_in_flight()
        return entry

    def finalize_in_flight(self) -> None:
        """Demote the in-flight entry to a completed one. Idempotent."""
        if self._in_flight is None:
            return
        self._in_flight.awaiting_first_token = False
        self._in_flight = None

    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Wipe the whole conversation."""
        self._messages.clear()
        self._display.clear()
        self._in_flight = None
        self._pending_calls.clear()
        self._answered_calls.clear()


def invocation_parts(text: str, invocations: Sequence[ToolInvocationPart]) -> list[MessagePart]:
    """Build assistant message parts: leading text (if any) then invocations."""
    parts: list[MessagePart] = []
    if text:
        parts.append(TextPart(text=text))
    parts.extend(invocations)
    return parts
