"""chatstream exception hierarchy.

Base exceptions for the conversation engine with correlation ID support.

Usage:
    from chatstream.exceptions import ProviderUnavailable, StreamTransportError

    try:
        tools = await catalog.get_tools()
    except ProviderUnavailable as e:
        logger.error("Tool listing failed (%s): %s", e.correlation_id, e)
"""

import uuid


class ChatStreamError(Exception):
    """Base exception for all chatstream errors.

    Carries a correlation_id for tracing errors across layers.
    """

    def __init__(self, message: str, *, correlation_id: str | None = None):
        self.correlation_id = correlation_id or str(uuid.uuid4())
        super().__init__(message)


class ProviderUnavailable(ChatStreamError):
    """Tool listing or stream opening could not reach its backend."""

    def __init__(self, message: str, *, provider: str | None = None, **kwargs):
        self.provider = provider
        super().__init__(message, **kwargs)


class ArgumentParseError(ChatStreamError):
    """A tool call's accumulated argument text is not a JSON object."""

    def __init__(self, message: str, *, tool_name: str, raw_arguments: str = "", **kwargs):
        self.tool_name = tool_name
        self.raw_arguments = raw_arguments
        super().__init__(message, **kwargs)


class ToolExecutionFailure(ChatStreamError):
    """The tool executor returned no result for a call."""

    def __init__(self, message: str, *, tool_name: str, call_id: str | None = None, **kwargs):
        self.tool_name = tool_name
        self.call_id = call_id
        super().__init__(message, **kwargs)


class StreamTransportError(ChatStreamError):
    """The provider event stream ended abnormally."""

    pass


class TurnLimitExceeded(ChatStreamError):
    """A unit of work exceeded its turn count or time budget."""

    def __init__(self, message: str, *, turns: int, **kwargs):
        self.turns = turns
        super().__init__(message, **kwargs)


class ConversationBusyError(ChatStreamError):
    """send() was called while a unit of work is still active."""

    pass


class ConversationStateError(ChatStreamError):
    """A conversation history invariant was violated."""

    pass


class ConfigurationError(ChatStreamError):
    """Errors from application configuration."""

    pass
