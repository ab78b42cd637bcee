"""Wire settings, logging, the LLM and tools into an orchestrator.

Usage:
    settings = get_settings()
    async with build_tool_client(settings) or contextlib.nullcontext() as tools:
        orchestrator = create_orchestrator(settings, tool_client=tools)
        await orchestrator.send("List the files in my project")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chatstream.llm import LangChainStreamClient, get_llm
from chatstream.logging_config import configure_logging
from chatstream.mcp import MCPServerConfig, MCPToolClient
from chatstream.orchestrator.conversation import StreamingConversationOrchestrator
from chatstream.settings import Settings, get_settings

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

logger = logging.getLogger(__name__)


def build_tool_client(settings: Settings | None = None) -> MCPToolClient | None:
    """Create (but do not connect) the configured MCP tool client."""
    settings = settings or get_settings()
    config = MCPServerConfig.from_settings(settings)
    if config is None:
        return None
    return MCPToolClient(config)


def create_orchestrator(
    settings: Settings | None = None,
    *,
    llm: BaseChatModel | None = None,
    tool_client: MCPToolClient | None = None,
    configure_logs: bool = True,
) -> StreamingConversationOrchestrator:
    """Build an orchestrator from settings.

    Args:
        settings: Settings to use (defaults to ``get_settings()``).
        llm: Pre-built chat model; built with ``get_llm()`` when omitted.
        tool_client: Connected tool client, or ``None`` for a tool-less chat.
        configure_logs: Install the chatstream log handler.

    Returns:
        A ready orchestrator with an empty conversation.
    """
    settings = settings or get_settings()
    if configure_logs:
        configure_logging(settings.log_level)

    if llm is None:
        llm = get_llm()

    logger.info(
        "Creating orchestrator (provider=%s, model=%s, tools=%s)",
        settings.llm_provider,
        settings.llm_model,
        tool_client.config.name if tool_client else "none",
    )
    return StreamingConversationOrchestrator(
        LangChainStreamClient(llm, system_prompt=settings.system_prompt),
        tool_client,
        excluded_tools=settings.excluded_tool_names,
        max_tool_turns=settings.max_tool_turns,
        turn_timeout=settings.turn_timeout_seconds,
        tool_timeout=settings.tool_timeout_seconds,
    )
