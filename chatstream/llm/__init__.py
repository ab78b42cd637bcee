"""LLM provider factory and stream client adapter."""

from chatstream.llm.factory import PROVIDER_BASE_URLS, get_llm, list_supported_providers
from chatstream.llm.stream_client import LangChainStreamClient, normalize_stream, to_langchain_messages

__all__ = [
    "PROVIDER_BASE_URLS",
    "LangChainStreamClient",
    "get_llm",
    "list_supported_providers",
    "normalize_stream",
    "to_langchain_messages",
]
