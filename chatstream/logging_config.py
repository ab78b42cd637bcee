"""Logging setup for chatstream.

Modules log through ``logging.getLogger(__name__)``; nothing is configured on
import. Applications call ``configure_logging()`` once at startup (the
orchestrator bootstrap does this by default).
"""

import logging
import sys
from typing import Literal

from chatstream.settings import get_settings

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

LOG_FORMAT = "%(levelname)s | %(name)s | %(message)s"

# HTTP clients, the OpenAI SDK, LangChain and the MCP SDK log every request
NOISY_LOGGERS = [
    "httpcore",
    "httpx",
    "asyncio",
    "openai",
    "langchain",
    "langchain_core",
    "langchain_openai",
    "mcp",
    "mcp.client.stdio",
]

# stdio transport reports every server stderr line at INFO
NOISY_LOGGER_LEVELS = {
    "mcp.client.stdio": logging.ERROR,
}


def suppress_noisy_loggers() -> None:
    """Raise third-party loggers to WARNING (or their override) and drop their handlers."""
    for name in NOISY_LOGGERS:
        noisy = logging.getLogger(name)
        noisy.setLevel(NOISY_LOGGER_LEVELS.get(name, logging.WARNING))
        noisy.handlers.clear()


def configure_logging(level: LogLevel | None = None) -> logging.Handler:
    """Install the stderr handler and set the chatstream log level.

    Replaces any handlers already on the root logger, so calling it again
    reconfigures rather than duplicating output.

    Args:
        level: Log level; defaults to ``settings.log_level``.

    Returns:
        The installed handler.
    """
    numeric_level = getattr(logging, level or get_settings().log_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)

    logging.getLogger("chatstream").setLevel(numeric_level)
    suppress_noisy_loggers()
    return handler


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
