"""Shared test fixtures for chatstream."""

import pytest
from pydantic import SecretStr

from chatstream.settings import Settings, get_settings


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Clear the cached settings so environment changes apply per test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    """Provide test settings with safe defaults."""
    return Settings(
        _env_file=None,
        environment="testing",
        debug=True,
        llm_api_key=SecretStr("test-api-key"),
        llm_model="gpt-4o",
    )


@pytest.fixture
def mock_settings(test_settings: Settings, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Mock get_settings() to return test settings."""
    from chatstream.llm import factory
    from chatstream import logging_config, settings

    monkeypatch.setattr(settings, "get_settings", lambda: test_settings)
    monkeypatch.setattr(factory, "get_settings", lambda: test_settings)
    monkeypatch.setattr(logging_config, "get_settings", lambda: test_settings)
    return test_settings
