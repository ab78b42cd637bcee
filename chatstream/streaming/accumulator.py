"""Stream accumulator: collect content and tool-call fragments of one turn.

Tool-call deltas arrive keyed by slot index; name and id usually come with
the first delta of a slot and argument JSON is split across many. Fragments
are concatenated in arrival order and never reordered or deduplicated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import uuid4

from chatstream.conversation.messages import ToolInvocationPart


@dataclass
class PartialToolCall:
    """A tool call still being streamed.

    Attributes:
        index: Slot index assigned by the provider.
        call_id: Tool call id (may arrive after the first fragment).
        name: Tool function name.
        arguments: Argument JSON text accumulated so far.
    """

    index: int
    call_id: str = ""
    name: str = ""
    arguments: str = ""

    def freeze(self) -> ToolInvocationPart:
        """Convert to an immutable invocation part.

        Providers that never send an id get a slot-derived one so tool
        results can still be linked.
        """
        return ToolInvocationPart(
            call_id=self.call_id or f"call_{self.index}_{uuid4().hex[:8]}",
            name=self.name,
            arguments=self.arguments,
        )


@dataclass
class StreamAccumulator:
    """Per-turn accumulation of text and tool-call slots."""

    text: str = ""
    slots: dict[int, PartialToolCall] = field(default_factory=dict)
    frozen: bool = False

    def add_content(self, fragment: str) -> str:
        """Append a text fragment and return the whole buffer."""
        self.text += fragment
        return self.text

    def add_tool_call_delta(
        self,
        index: int,
        arguments: str | None = None,
        *,
        call_id: str | None = None,
        name: str | None = None,
    ) -> PartialToolCall:
        """Merge one tool-call delta into its slot, creating it on first sight."""
        if self.frozen:
            raise RuntimeError("Tool-call slots are frozen for this turn")
        slot = self.slots.get(index)
        if slot is None:
            slot = PartialToolCall(index=index)
            self.slots[index] = slot
        if call_id:
            slot.call_id = call_id
        if name:
            slot.name = name
        if arguments:
            slot.arguments += arguments
        return slot

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.slots)

    def freeze(self) -> list[ToolInvocationPart]:
        """Freeze all slots and return invocations in slot-index order."""
        self.frozen = True
        return [self.slots[index].freeze() for index in sorted(self.slots)]
