"""OAuth refresh-token exchange against the authorization server."""

from __future__ import annotations

import httpx

from claude_auth_setup.auth.errors import RefreshError, RefreshTimeoutError
from claude_auth_setup.auth.models import TokenResponse
from claude_auth_setup.config import DEFAULT_OAUTH_TIMEOUT, OAUTH_CLIENT_ID, OAUTH_TOKEN_URL
from claude_auth_setup.logging import get_logger

log = get_logger("claude_auth_setup.auth.oauth")


class OAuthClient:
    """Performs ``grant_type=refresh_token`` exchanges.

    Each exchange opens its own short-lived ``httpx.AsyncClient``; setup
    makes at most one call per run so there is nothing to pool.
    """

    def __init__(
        self,
        token_url: str = OAUTH_TOKEN_URL,
        client_id: str = OAUTH_CLIENT_ID,
        timeout: float = DEFAULT_OAUTH_TIMEOUT,
    ) -> None:
        self._token_url = token_url
        self._client_id = client_id
        self._timeout = timeout

    async def refresh_token(self, refresh_token: str) -> TokenResponse:
        """Exchange *refresh_token* for a new access/refresh token pair.

        Raises:
            RefreshTimeoutError: The endpoint did not respond in time.
            RefreshError: Transport failure, non-2xx status, or a body
                that is not a valid token response.
        """
        log.info("oauth_refresh_started", token_url=self._token_url)

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(
                    self._token_url,
                    data={
                        "grant_type": "refresh_token",
                        "client_id": self._client_id,
                        "refresh_token": refresh_token,
                    },
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.TimeoutException as e:
            raise RefreshTimeoutError(
                f"Token refresh timed out after {self._timeout}s"
            ) from e
        except httpx.RequestError as e:
            raise RefreshError(f"Token refresh request failed: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise RefreshError(
                f"Failed to refresh token: {resp.status_code} - {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise RefreshError(
                "Token endpoint returned invalid JSON",
                status_code=resp.status_code,
                body=resp.text,
            ) from e

        tokens = TokenResponse.from_api(data)
        log.info("oauth_refresh_succeeded", expires_in=tokens.expires_in)
        return tokens
