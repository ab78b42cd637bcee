"""Message models for the wire history and the display list.

Wire messages are immutable once appended. Display messages are the
UI-facing mirror; the single in-flight one is mutated in place while a
response streams.
"""

from enum import StrEnum
from typing import Annotated, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from chatstream.rendering.segments import Segment


class Role(StrEnum):
    """Conversation roles."""

    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class TextPart(BaseModel):
    """Plain text content part."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ToolInvocationPart(BaseModel):
    """An assistant-issued tool call.

    ``arguments`` keeps the raw JSON text exactly as streamed so history
    replays what the provider produced, even when it did not parse.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_invocation"] = "tool_invocation"
    call_id: str
    name: str
    arguments: str = ""


class ToolResultPart(BaseModel):
    """The result of a tool call, linked by ``call_id``."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_result"] = "tool_result"
    call_id: str
    content: str


MessagePart = Annotated[TextPart | ToolInvocationPart | ToolResultPart, Field(discriminator="type")]


class Message(BaseModel):
    """A single entry of the wire history sent to the provider."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str | tuple[MessagePart, ...] = ""
    tool_call_id: str | None = Field(
        default=None,
        description="Links a tool-role message to the invocation it answers",
    )

    @property
    def text(self) -> str:
        """Concatenated text of the message."""
        if isinstance(self.content, str):
            return self.content
        chunks = []
        for part in self.content:
            if isinstance(part, TextPart):
                chunks.append(part.text)
            elif isinstance(part, ToolResultPart):
                chunks.append(part.content)
        return "".join(chunks)

    @property
    def tool_invocations(self) -> list[ToolInvocationPart]:
        if isinstance(self.content, str):
            return []
        return [part for part in self.content if isinstance(part, ToolInvocationPart)]


class DisplayMessage(BaseModel):
    """UI-facing entry observed by the presentation layer."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    role: Role
    text: str = ""
    awaiting_first_token: bool = False
    is_error: bool = False
    segments: list[Segment] = Field(default_factory=list)
