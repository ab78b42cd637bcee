"""MCP stdio tool client.

Launches one MCP server over stdio and exposes its tools through the
``ToolProvider`` and ``ToolExecutor`` contracts.

Usage:
    async with MCPToolClient(config) as client:
        orchestrator = StreamingConversationOrchestrator(stream_client, client)
"""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from typing import TYPE_CHECKING, Any

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

from chatstream.exceptions import ProviderUnavailable
from chatstream.interfaces import ToolDescriptor

if TYPE_CHECKING:
    from chatstream.mcp.config import MCPServerConfig

logger = logging.getLogger(__name__)


class MCPToolClient:
    """Tool provider and executor backed by an MCP ``ClientSession``."""

    def __init__(self, config: MCPServerConfig, *, session: ClientSession | None = None):
        self.config = config
        self._session = session
        self._stack: AsyncExitStack | None = None

    @property
    def is_connected(self) -> bool:
        return self._session is not None

    async def connect(self) -> None:
        """Start the server process and initialize the session.

        Raises:
            ConfigurationError: If the server configuration is invalid.
            ProviderUnavailable: If the server could not be started.
        """
        if self._session is not None:
            return
        self.config.validate_or_raise()

        command, args, env = self.config.transport_details()
        params = StdioServerParameters(command=command, args=args, env=env or None)

        stack = AsyncExitStack()
        try:
            read_stream, write_stream = await stack.enter_async_context(stdio_client(params))
            session = await stack.enter_async_context(ClientSession(read_stream, write_stream))
            await session.initialize()
        except Exception as e:
            await stack.aclose()
            raise ProviderUnavailable(
                f"Could not start MCP server '{self.config.name}': {e}",
                provider=self.config.name,
            ) from e

        self._stack = stack
        self._session = session
        logger.info("Connected to MCP server %s (%s)", self.config.name, command)

    async def close(self) -> None:
        self._session = None
        if self._stack is not None:
            try:
                await self._stack.aclose()
            finally:
                self._stack = None
            logger.info("Disconnected from MCP server %s", self.config.name)

    async def __aenter__(self) -> MCPToolClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def list_tools(self) -> list[ToolDescriptor]:
        """List the server's tools.

        Raises:
            ProviderUnavailable: Not connected or the listing failed.
        """
        if self._session is None:
            raise ProviderUnavailable("MCP client is not connected", provider=self.config.name)
        try:
            result = await self._session.list_tools()
        except Exception as e:
            raise ProviderUnavailable(
                f"Failed to list tools from '{self.config.name}': {e}",
                provider=self.config.name,
            ) from e

        tools = []
        for tool in getattr(result, "tools", None) or []:
            schema = getattr(tool, "inputSchema", None)
            tools.append(
                ToolDescriptor(
                    name=tool.name,
                    description=getattr(tool, "description", None) or "",
                    parameters=dict(schema) if isinstance(schema, dict) else {"type": "object", "properties": {}},
                )
            )
        logger.debug("MCP server %s offers %d tools", self.config.name, len(tools))
        return tools

    async def invoke(self, name: str, arguments: dict[str, Any]) -> str | None:
        """Call a tool; ``None`` on error results or transport failures."""
        if self._session is None:
            logger.warning("Tool %s called while MCP client is not connected", name)
            return None
        try:
            result = await self._session.call_tool(name, arguments=arguments)
        except Exception:
            logger.exception("MCP tool %s failed", name)
            return None

        if getattr(result, "isError", False):
            logger.warning("MCP tool %s returned an error result", name)
            return None
        return _result_text(result)


def _result_text(result: Any) -> str:
    """Join the text blocks of a tool result."""
    parts: list[str] = []
    for block in getattr(result, "content", None) or []:
        text = getattr(block, "text", None)
        if isinstance(text, str):
            parts.append(text)
        else:
            parts.append(str(block.model_dump()) if hasattr(block, "model_dump") else str(block))
    return "\n".join(parts)
