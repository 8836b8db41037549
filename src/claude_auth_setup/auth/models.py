"""Data models for stored credentials and token responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from claude_auth_setup.auth.errors import RefreshError

MCP_SERVERS_FLAG = "enableAllProjectMcpServers"


@dataclass
class Credentials:
    """OAuth credential record as stored in ``.credentials.json``."""

    access_token: str
    refresh_token: str
    expires_at: int  # epoch milliseconds

    def to_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Credentials:
        return cls(
            access_token=str(data["access_token"]),
            refresh_token=str(data["refresh_token"]),
            expires_at=int(data["expires_at"]),
        )


@dataclass
class TokenResponse:
    """Successful response from the OAuth token endpoint."""

    access_token: str
    refresh_token: str
    expires_in: int  # seconds

    @classmethod
    def from_api(cls, data: Any) -> TokenResponse:
        """Build from a decoded JSON body.

        Raises:
            RefreshError: The body is missing fields or has the wrong types.
        """
        if not isinstance(data, dict):
            raise RefreshError("Token response is not a JSON object")
        try:
            access_token = data["access_token"]
            refresh_token = data["refresh_token"]
            expires_in = int(data["expires_in"])
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            raise RefreshError(f"Malformed token response: {e!r}") from e
        if expires_in <= 0:
            raise RefreshError(f"Token response has non-positive expires_in: {expires_in}")
        if not isinstance(access_token, str) or not isinstance(refresh_token, str):
            raise RefreshError("Token response fields must be strings")
        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=expires_in,
        )


@dataclass
class SetupResult:
    """Outcome of a credential setup run."""

    configured: bool = False
    refreshed: bool = False
    expires_at: int | None = None
    propagated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "configured": self.configured,
            "refreshed": self.refreshed,
            "expires_at": self.expires_at,
            "propagated": self.propagated,
        }
