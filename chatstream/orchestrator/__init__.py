"""Conversation orchestration."""

from chatstream.orchestrator.bootstrap import build_tool_client, create_orchestrator
from chatstream.orchestrator.conversation import (
    DEFAULT_MAX_TOOL_TURNS,
    StreamingConversationOrchestrator,
    TurnResult,
)

__all__ = [
    "DEFAULT_MAX_TOOL_TURNS",
    "StreamingConversationOrchestrator",
    "TurnResult",
    "build_tool_client",
    "create_orchestrator",
]
