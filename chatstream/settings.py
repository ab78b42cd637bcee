"""chatstream settings.

Read from environment variables (case-insensitive) and an optional .env file.
"""

import shlex
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """LLM, conversation-loop and tool-server configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,  # Allow both field name and alias
    )

    # Environment
    environment: Literal["development", "staging", "production", "testing"] = "development"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # LLM Configuration
    # Supports: openai, openrouter, ollama, together, groq, or custom
    llm_provider: Literal["openai", "openrouter", "ollama", "together", "groq", "custom"] = Field(
        default="openai",
        description="LLM provider (openai, openrouter, ollama, together, groq, custom)",
    )
    llm_model: str = Field(
        default="gpt-4o",
        description="Model name (provider-specific format)",
    )
    llm_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="LLM temperature for generation",
    )
    llm_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="API key for the LLM provider",
        validation_alias=AliasChoices("llm_api_key", "openai_api_key", "openrouter_api_key"),
    )
    llm_base_url: str | None = Field(
        default=None,
        description="Custom base URL for OpenAI-compatible APIs",
    )
    system_prompt: str | None = Field(
        default=None,
        description="Optional system prompt prepended to every request",
    )

    # Conversation loop bounds
    max_tool_turns: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum provider turns per send() before the loop is aborted",
    )
    turn_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Optional wall-clock budget for one send() (all turns included)",
    )
    tool_timeout_seconds: int = Field(
        default=30,
        ge=1,
        le=600,
        description="Maximum time a single tool invocation may take",
    )

    # Tools
    excluded_tools: str = Field(
        default="",
        description="Comma-separated tool names never offered to the provider",
    )

    # MCP tool server (stdio transport)
    mcp_server_command: str | None = Field(
        default=None,
        description="Command launching the MCP tool server (empty = no tools)",
    )
    mcp_server_args: str = Field(
        default="",
        description="Arguments for the MCP server command (shell-style quoting)",
    )
    mcp_server_env: dict[str, str] = Field(
        default_factory=dict,
        description="Extra environment variables for the MCP server process",
    )

    @property
    def excluded_tool_names(self) -> frozenset[str]:
        """Parsed exclusion list."""
        return frozenset(name.strip() for name in self.excluded_tools.split(",") if name.strip())

    @property
    def mcp_server_arg_list(self) -> list[str]:
        return shlex.split(self.mcp_server_args)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded on first use."""
    return Settings()
