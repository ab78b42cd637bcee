"""MCP server configuration.

Maps the supported server types to the stdio transport details
(command, args, env) used to launch them.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field

from chatstream.exceptions import ConfigurationError

if TYPE_CHECKING:
    from chatstream.settings import Settings

ServerType = Literal["github", "filesystem", "sqlite", "custom"]

NPX = "npx"


class MCPServerConfig(BaseModel):
    """One MCP tool server."""

    model_config = ConfigDict(frozen=True)

    name: str
    server_type: ServerType = "custom"
    enabled: bool = True

    # github
    username: str | None = None
    token: str | None = None
    # filesystem / sqlite
    path: str = ""
    # custom
    command: str = ""
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)

    def transport_details(self) -> tuple[str, list[str], dict[str, str]]:
        """Return ``(command, args, env)`` for launching the server."""
        if self.server_type == "github":
            return NPX, ["-y", "@modelcontextprotocol/server-github"], {
                "GITHUB_PERSONAL_ACCESS_TOKEN": self.token or ""
            }
        if self.server_type == "filesystem":
            return NPX, ["-y", "@modelcontextprotocol/server-filesystem", self.path], {}
        if self.server_type == "sqlite":
            return NPX, ["-y", "@modelcontextprotocol/server-sqlite", "--db-path", self.path], {}
        return self.command, list(self.args), dict(self.env)

    def validation_error(self) -> str | None:
        """Describe why this configuration cannot be used, or ``None``."""
        if self.server_type == "github":
            if not self.token:
                return "GitHub server requires a personal access token"
        elif self.server_type == "filesystem":
            if not self.path or not os.path.exists(self.path):
                return f"Filesystem path does not exist: {self.path!r}"
        elif self.server_type == "sqlite":
            if not self.path.endswith(".db"):
                return f"SQLite path must end with .db: {self.path!r}"
        elif not self.command:
            return "Custom server requires a command"
        return None

    def is_valid(self) -> bool:
        return self.validation_error() is None

    def validate_or_raise(self) -> None:
        """Raises:
        ConfigurationError: If the configuration is unusable.
        """
        error = self.validation_error()
        if error is not None:
            raise ConfigurationError(f"Invalid MCP server '{self.name}': {error}")

    @classmethod
    def from_settings(cls, settings: Settings) -> MCPServerConfig | None:
        """Build the default tool server from settings; ``None`` if unset."""
        if not settings.mcp_server_command:
            return None
        return cls(
            name="default",
            server_type="custom",
            command=settings.mcp_server_command,
            args=settings.mcp_server_arg_list,
            env=dict(settings.mcp_server_env),
        )
