"""Chat model factory for OpenAI-compatible providers.

Every supported backend speaks the OpenAI chat-completions protocol, so one
``ChatOpenAI`` client covers them all; only the base URL and key differ.
Provider, model, key and base URL come from ``LLM_*`` settings and can be
overridden per call. A model name of the form ``ollama/<model>`` selects the
local Ollama endpoint and needs no key.
"""

from typing import Any

from langchain_core.language_models import BaseChatModel

from chatstream.exceptions import ConfigurationError
from chatstream.settings import get_settings

PROVIDER_BASE_URLS = {
    "openai": "https://api.openai.com/v1",
    "openrouter": "https://openrouter.ai/api/v1",
    "together": "https://api.together.xyz/v1",
    "groq": "https://api.groq.com/openai/v1",
    "ollama": "http://localhost:11434/v1",
}

OLLAMA_PREFIX = "ollama/"

# OpenRouter attribution headers
OPENROUTER_HEADERS = {
    "HTTP-Referer": "https://github.com/chatstream",
    "X-Title": "chatstream",
}


def _split_model(model_name: str) -> tuple[str | None, str]:
    """Return ``(implied provider, model)`` for prefixed model names."""
    if model_name.startswith(OLLAMA_PREFIX):
        return "ollama", model_name[len(OLLAMA_PREFIX) :]
    return None, model_name


def get_llm(
    temperature: float | None = None,
    model: str | None = None,
    provider: str | None = None,
    **kwargs: Any,
) -> BaseChatModel:
    """Build a streaming chat model.

    Args:
        temperature: Override ``LLM_TEMPERATURE``.
        model: Override ``LLM_MODEL``.
        provider: Override ``LLM_PROVIDER``.
        **kwargs: Passed through to ``ChatOpenAI``.

    Returns:
        A ``ChatOpenAI`` instance with streaming enabled.

    Raises:
        ConfigurationError: Missing API key, or a provider with no known
            base URL and no ``LLM_BASE_URL``.
    """
    from langchain_openai import ChatOpenAI

    settings = get_settings()
    implied_provider, model_name = _split_model(model or settings.llm_model)
    provider = provider or implied_provider or settings.llm_provider

    api_key = settings.llm_api_key.get_secret_value()
    if not api_key:
        if provider != "ollama":
            raise ConfigurationError(f"LLM_API_KEY is required when using {provider} provider")
        api_key = "ollama"

    base_url = settings.llm_base_url or PROVIDER_BASE_URLS.get(provider)
    if base_url is None:
        raise ConfigurationError(f"Unknown provider '{provider}'. Set LLM_BASE_URL for custom providers.")

    if provider == "openrouter":
        kwargs["default_headers"] = {**OPENROUTER_HEADERS, **kwargs.get("default_headers", {})}

    return ChatOpenAI(
        model=model_name,
        temperature=settings.llm_temperature if temperature is None else temperature,
        streaming=True,
        api_key=api_key,
        base_url=base_url,
        **kwargs,
    )


def list_supported_providers() -> dict[str, str]:
    """Known providers and their default base URLs."""
    return dict(PROVIDER_BASE_URLS)
