"""Tool catalog and capability handles."""

from chatstream.tools.catalog import TOOL_CACHE_TTL_SECONDS, ToolCatalog, ToolHandle

__all__ = [
    "TOOL_CACHE_TTL_SECONDS",
    "ToolCatalog",
    "ToolHandle",
]
