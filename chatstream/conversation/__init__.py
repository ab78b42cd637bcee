"""Conversation history and display models."""

from chatstream.conversation.messages import (
    DisplayMessage,
    Message,
    MessagePart,
    Role,
    TextPart,
    ToolInvocationPart,
    ToolResultPart,
)
from chatstream.conversation.state import ConversationState, invocation_parts

__all__ = [
    "ConversationState",
    "DisplayMessage",
    "Message",
    "MessagePart",
    "Role",
    "TextPart",
    "ToolInvocationPart",
    "ToolResultPart",
    "invocation_parts",
]
