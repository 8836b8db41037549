"""Pytest fixtures for credential setup tests."""

from unittest.mock import AsyncMock

import pytest

from claude_auth_setup.auth.models import TokenResponse
from claude_auth_setup.auth.oauth import OAuthClient
from claude_auth_setup.auth.store import ConfigStore

_ISOLATED_ENV = [
    "CLAUDE_ACCESS_TOKEN",
    "CLAUDE_REFRESH_TOKEN",
    "CLAUDE_EXPIRES_AT",
    "GITHUB_PAT",
    "GITHUB_REPOSITORY",
    "GITHUB_OUTPUT",
    "GITHUB_ACTIONS",
    "XDG_CONFIG_HOME",
    "OAUTH_TOKEN_URL",
    "OAUTH_CLIENT_ID",
    "OAUTH_TIMEOUT",
    "ENVIRONMENT",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch):
    """Keep the runner's own environment out of Settings and clear its cache."""
    for key in _ISOLATED_ENV:
        monkeypatch.delenv(key, raising=False)

    from claude_auth_setup.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store(tmp_path):
    """ConfigStore rooted in a temporary config directory."""
    return ConfigStore(tmp_path / "claude")


@pytest.fixture
def token_response():
    """A successful refresh exchange result."""
    return TokenResponse(
        access_token="new-access-token-abcdef",
        refresh_token="new-refresh-token-abcdef",
        expires_in=28800,
    )


@pytest.fixture
def mock_oauth_client(token_response):
    """OAuthClient whose refresh succeeds."""
    client = AsyncMock(spec=OAuthClient)
    client.refresh_token = AsyncMock(return_value=token_response)
    return client
