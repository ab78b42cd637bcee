"""MCP tool server backend."""

from chatstream.mcp.client import MCPToolClient
from chatstream.mcp.config import MCPServerConfig

__all__ = ["MCPServerConfig", "MCPToolClient"]
