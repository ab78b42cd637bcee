"""Boundary contracts consumed by the conversation engine.

The engine never talks HTTP or spawns processes itself; it drives these
capabilities. Concrete adapters live in ``chatstream.llm`` and
``chatstream.mcp``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from chatstream.conversation.messages import Message
    from chatstream.streaming.events import StreamEvent


class ToolDescriptor(BaseModel):
    """A callable tool as advertised by a tool provider."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON schema of the tool arguments",
    )

    def to_openai_tool(self) -> dict[str, Any]:
        """Render in the OpenAI function-calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@runtime_checkable
class StreamClient(Protocol):
    """Opens one provider stream for the given history and tools."""

    async def open_stream(
        self,
        history: Sequence[Message],
        tools: Sequence[ToolDescriptor],
    ) -> AsyncIterator[StreamEvent]: ...


@runtime_checkable
class ToolProvider(Protocol):
    """Lists the tools currently available."""

    async def list_tools(self) -> list[ToolDescriptor]: ...


@runtime_checkable
class ToolExecutor(Protocol):
    """Executes a named tool. ``None`` is the only failure signal."""

    async def invoke(self, name: str, arguments: dict[str, Any]) -> str | None: ...
