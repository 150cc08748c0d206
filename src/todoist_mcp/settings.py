"""
Configuration management for the Todoist MCP server.

Settings are read from the environment (prefix ``TODOIST_``) and from an
optional ``.env`` file in the working directory.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from todoist_mcp.constants import DEFAULT_BASE_URL


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="TODOIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Todoist API
    api_token: Optional[SecretStr] = Field(
        default=None,
        description="Todoist API token. HTTP transports may supply it per request instead.",
    )
    base_url: str = Field(default=DEFAULT_BASE_URL)
    timeout: float = Field(default=30.0, gt=0)

    # Server
    transport: Literal["stdio", "sse", "streamable-http"] = "stdio"
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    log_level: str = "INFO"

    def get_api_token(self) -> str | None:
        """Return the configured API token as plain text, if any."""
        if self.api_token is None:
            return None
        token = self.api_token.get_secret_value().strip()
        return token or None


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
