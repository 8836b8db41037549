"""Configuration management for the credential setup step."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

OAUTH_TOKEN_URL = "https://console.anthropic.com/v1/oauth/token"
OAUTH_CLIENT_ID = "9d1c250a-e61b-44d9-88ed-5944d1962f5e"
DEFAULT_OAUTH_TIMEOUT = 30.0

SETTINGS_FILENAME = "settings.json"
CREDENTIALS_FILENAME = ".credentials.json"


def resolve_config_dir(env: Mapping[str, str], home: Path | None = None) -> Path:
    """Return the assistant config directory for the given environment.

    ``$XDG_CONFIG_HOME/claude`` wins when the variable is set and non-empty,
    otherwise ``~/.claude``.
    """
    xdg_config_home = env.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return Path(xdg_config_home) / "claude"
    return (home or Path.home()) / ".claude"


class Settings(BaseSettings):
    """Settings loaded from the workflow step environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="",
    )

    # OAuth credentials handed to the step
    claude_access_token: SecretStr | None = Field(
        default=None, description="OAuth access token for the assistant"
    )
    claude_refresh_token: SecretStr | None = Field(
        default=None, description="OAuth refresh token for the assistant"
    )
    claude_expires_at: str | None = Field(
        default=None, description="Access token expiry in epoch milliseconds (raw string)"
    )

    # Secret propagation
    github_pat: SecretStr | None = Field(
        default=None, description="Token allowed to update repository secrets"
    )
    github_repository: str | None = Field(
        default=None, description="Repository identifier in owner/repo form"
    )
    github_output: str | None = Field(
        default=None, description="Path of the GitHub Actions step output file"
    )
    github_actions: bool = Field(
        default=False, description="Set by the runner; enables log masking of rotated tokens"
    )

    # Config directory
    xdg_config_home: str | None = Field(default=None, description="XDG config home override")

    # OAuth endpoint
    oauth_token_url: str = Field(default=OAUTH_TOKEN_URL, description="OAuth token endpoint")
    oauth_client_id: str = Field(default=OAUTH_CLIENT_ID, description="OAuth client identifier")
    oauth_timeout: float = Field(
        default=DEFAULT_OAUTH_TIMEOUT, description="Refresh request timeout in seconds"
    )

    # Application
    environment: str = Field(default="production", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("oauth_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate the refresh timeout is positive."""
        if v <= 0:
            raise ValueError(f"oauth_timeout must be positive, got: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate the log level is one logging understands."""
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @property
    def config_dir(self) -> Path:
        """Directory holding settings.json and .credentials.json."""
        env = {"XDG_CONFIG_HOME": self.xdg_config_home} if self.xdg_config_home else {}
        return resolve_config_dir(env)

    @staticmethod
    def reveal(value: SecretStr | None) -> str | None:
        """Unwrap an optional secret, treating empty strings as unset."""
        if value is None:
            return None
        return value.get_secret_value() or None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
