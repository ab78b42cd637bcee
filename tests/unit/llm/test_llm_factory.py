"""Unit tests for the LLM provider factory."""

import pytest
from pydantic import SecretStr

from chatstream.exceptions import ConfigurationError
from chatstream.llm import PROVIDER_BASE_URLS, get_llm, list_supported_providers


class TestGetLLM:
    def test_builds_streaming_openai_model(self, mock_settings):
        llm = get_llm()

        assert llm.model_name == "gpt-4o"
        assert llm.streaming is True
        assert llm.openai_api_base == PROVIDER_BASE_URLS["openai"]

    def test_overrides(self, mock_settings):
        llm = get_llm(temperature=0.1, model="gpt-4o-mini")
        assert llm.model_name == "gpt-4o-mini"
        assert llm.temperature == 0.1

    def test_missing_api_key_raises(self, mock_settings):
        mock_settings.llm_api_key = SecretStr("")
        with pytest.raises(ConfigurationError, match="LLM_API_KEY"):
            get_llm()

    def test_ollama_prefix_needs_no_key(self, mock_settings):
        mock_settings.llm_api_key = SecretStr("")
        llm = get_llm(model="ollama/llama3")

        assert llm.model_name == "llama3"
        assert llm.openai_api_base == PROVIDER_BASE_URLS["ollama"]

    def test_custom_provider_requires_base_url(self, mock_settings):
        with pytest.raises(ConfigurationError, match="LLM_BASE_URL"):
            get_llm(provider="custom")

        mock_settings.llm_base_url = "http://localhost:8000/v1"
        assert get_llm(provider="custom").openai_api_base == "http://localhost:8000/v1"

    def test_openrouter_headers(self, mock_settings):
        llm = get_llm(provider="openrouter")
        assert llm.default_headers["X-Title"] == "chatstream"


def test_list_supported_providers_is_a_copy():
    providers = list_supported_providers()
    providers.clear()
    assert "openai" in list_supported_providers()
