"""Normalized stream event type.

Every provider adapter turns its native chunks into ``StreamEvent`` dicts so
the orchestrator consumes a single shape:

- ``content_delta`` carries ``content``, a text fragment
- ``tool_call_delta`` carries ``index``, ``call_id``, ``name`` and an
  ``arguments`` fragment
- ``terminal`` carries the ``outcome`` (``stop``, ``tool_calls``, ...) and the
  accumulated ``content`` as reported by the provider
"""

from __future__ import annotations

from typing import Any

CONTENT_DELTA = "content_delta"
TOOL_CALL_DELTA = "tool_call_delta"
TERMINAL = "terminal"

OUTCOME_STOP = "stop"
OUTCOME_TOOL_CALLS = "tool_calls"


class StreamEvent(dict[str, Any]):
    """A typed dict for events of one provider stream.

    Attributes:
        type: Event type (content_delta, tool_call_delta, terminal)
        content: Text fragment (content_delta) or accumulated text (terminal)
        index: Tool-call slot index (tool_call_delta)
        call_id: Tool-call id, usually only on the first delta of a slot
        name: Tool name, usually only on the first delta of a slot
        arguments: Argument JSON fragment (tool_call_delta)
        outcome: Finish reason (terminal)
    """

    def __init__(
        self,
        type: str,
        content: str | None = None,
        index: int | None = None,
        call_id: str | None = None,
        name: str | None = None,
        arguments: str | None = None,
        outcome: str | None = None,
        **kwargs: object,
    ):
        super().__init__(
            type=type,
            content=content,
            index=index,
            call_id=call_id,
            name=name,
            arguments=arguments,
            outcome=outcome,
            **kwargs,
        )

    @classmethod
    def content_delta(cls, text: str) -> StreamEvent:
        return cls(type=CONTENT_DELTA, content=text)

    @classmethod
    def tool_call_delta(
        cls,
        index: int,
        arguments: str = "",
        *,
        call_id: str | None = None,
        name: str | None = None,
    ) -> StreamEvent:
        return cls(type=TOOL_CALL_DELTA, index=index, call_id=call_id, name=name, arguments=arguments)

    @classmethod
    def terminal(cls, outcome: str, content: str = "") -> StreamEvent:
        return cls(type=TERMINAL, outcome=outcome, content=content)


def normalize_outcome(finish_reason: str | None) -> str | None:
    """Map provider finish reasons onto ``stop`` / ``tool_calls``.

    Unknown reasons (``length``, ``content_filter``) are passed through.
    """
    if finish_reason is None:
        return None
    reason = str(finish_reason).lower()
    if reason in ("tool_calls", "function_call", "tool_use"):
        return OUTCOME_TOOL_CALLS
    if reason in ("stop", "end_turn", "stop_sequence"):
        return OUTCOME_STOP
    return reason
