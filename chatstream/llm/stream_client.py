"""LangChain stream client: normalize ``BaseChatModel.astream`` into stream events.

Content chunks become ``content_delta`` events, ``tool_call_chunks`` become
``tool_call_delta`` events keyed by their index, and the finish reason of the
last chunk becomes the ``terminal`` event.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, ToolMessage

from chatstream.conversation.messages import Role
from chatstream.streaming.events import OUTCOME_STOP, OUTCOME_TOOL_CALLS, StreamEvent, normalize_outcome

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, AsyncIterator, Sequence

    from langchain_core.language_models import BaseChatModel

    from chatstream.conversation.messages import Message
    from chatstream.interfaces import ToolDescriptor

logger = logging.getLogger(__name__)


def _decode_arguments(raw: str) -> dict[str, Any]:
    """Best-effort decode for replaying invocations; malformed args become {}."""
    if not raw.strip():
        return {}
    try:
        args = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    return args if isinstance(args, dict) else {}


def to_langchain_messages(history: Sequence[Message], system_prompt: str | None = None) -> list[BaseMessage]:
    """Convert wire history into LangChain messages.

    Args:
        history: Conversation history in order.
        system_prompt: Optional system message placed first.

    Returns:
        LangChain messages ready for ``astream``.
    """
    messages: list[BaseMessage] = []
    if system_prompt:
        messages.append(SystemMessage(content=system_prompt))

    for message in history:
        if message.role == Role.USER:
            messages.append(HumanMessage(content=message.text))
        elif message.role == Role.ASSISTANT:
            invocations = message.tool_invocations
            if invocations:
                tool_calls = [
                    {"name": inv.name, "args": _decode_arguments(inv.arguments), "id": inv.call_id}
                    for inv in invocations
                ]
                messages.append(AIMessage(content=message.text, tool_calls=tool_calls))
            else:
                messages.append(AIMessage(content=message.text))
        elif message.role == Role.TOOL:
            messages.append(ToolMessage(content=message.text, tool_call_id=message.tool_call_id or ""))

    return messages


class LangChainStreamClient:
    """``StreamClient`` backed by a LangChain chat model."""

    def __init__(self, llm: BaseChatModel, *, system_prompt: str | None = None):
        self.llm = llm
        self.system_prompt = system_prompt

    async def open_stream(
        self,
        history: Sequence[Message],
        tools: Sequence[ToolDescriptor],
    ) -> AsyncIterator[StreamEvent]:
        """Bind tools and start streaming.

        Returns:
            An async iterator of normalized events ending with ``terminal``.
        """
        messages = to_langchain_messages(history, self.system_prompt)
        llm = self.llm.bind_tools([tool.to_openai_tool() for tool in tools]) if tools else self.llm
        logger.debug("Opening stream with %d messages and %d tools", len(messages), len(tools))
        return normalize_stream(llm.astream(messages))


async def normalize_stream(astream: AsyncIterator[Any]) -> AsyncGenerator[StreamEvent, None]:
    """Turn LangChain message chunks into stream events.

    Token content is skipped when tool call chunks are present in the same
    chunk. When the provider reports no finish reason the outcome is inferred
    from whether tool call chunks were seen.
    """
    collected_content = ""
    saw_tool_calls = False
    finish_reason: str | None = None

    async for chunk in astream:
        tool_call_chunks = getattr(chunk, "tool_call_chunks", None) or []

        if chunk.content and not tool_call_chunks:
            token = chunk.content if isinstance(chunk.content, str) else _flatten_content(chunk.content)
            if token:
                collected_content += token
                yield StreamEvent.content_delta(token)

        for tc_chunk in tool_call_chunks:
            saw_tool_calls = True
            index = tc_chunk.get("index")
            yield StreamEvent.tool_call_delta(
                index if index is not None else 0,
                tc_chunk.get("args") or "",
                call_id=tc_chunk.get("id"),
                name=tc_chunk.get("name"),
            )

        metadata = getattr(chunk, "response_metadata", None) or {}
        if metadata.get("finish_reason"):
            finish_reason = metadata["finish_reason"]

    outcome = normalize_outcome(finish_reason)
    if outcome is None:
        outcome = OUTCOME_TOOL_CALLS if saw_tool_calls else OUTCOME_STOP
    yield StreamEvent.terminal(outcome, collected_content)


def _flatten_content(content: list[Any]) -> str:
    """Extract text from list-style content blocks."""
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)
