"""Tests for the OAuth refresh exchange."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from claude_auth_setup.auth.errors import RefreshError, RefreshTimeoutError
from claude_auth_setup.auth.models import TokenResponse
from claude_auth_setup.auth.oauth import OAuthClient
from claude_auth_setup.config import OAUTH_CLIENT_ID, OAUTH_TOKEN_URL


def _mock_http_response(status_code: int = 200, json_data=None, text: str = ""):
    """Return a MagicMock that behaves like an httpx.Response."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    resp.json.return_value = json_data
    return resp


def _mock_async_client(post: AsyncMock) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.post = post
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


class TestRefreshToken:
    """Tests for OAuthClient.refresh_token()."""

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        resp = _mock_http_response(
            200,
            {"access_token": "at-new", "refresh_token": "rt-new", "expires_in": 3600},
        )
        post = AsyncMock(return_value=resp)

        with patch("httpx.AsyncClient", return_value=_mock_async_client(post)):
            tokens = await OAuthClient().refresh_token("rt-old")

        assert tokens == TokenResponse("at-new", "rt-new", 3600)

    @pytest.mark.asyncio
    async def test_request_shape(self) -> None:
        """Form-encoded refresh grant to the fixed endpoint."""
        resp = _mock_http_response(
            200, {"access_token": "a", "refresh_token": "r", "expires_in": 60}
        )
        post = AsyncMock(return_value=resp)

        with patch("httpx.AsyncClient", return_value=_mock_async_client(post)) as mock_cls:
            await OAuthClient(timeout=12.5).refresh_token("rt-old")

        mock_cls.assert_called_once_with(timeout=12.5)
        args, kwargs = post.call_args
        assert args == (OAUTH_TOKEN_URL,)
        assert kwargs["data"] == {
            "grant_type": "refresh_token",
            "client_id": OAUTH_CLIENT_ID,
            "refresh_token": "rt-old",
        }
        assert kwargs["headers"]["Content-Type"] == "application/x-www-form-urlencoded"

    @pytest.mark.asyncio
    async def test_custom_endpoint(self) -> None:
        resp = _mock_http_response(
            200, {"access_token": "a", "refresh_token": "r", "expires_in": 60}
        )
        post = AsyncMock(return_value=resp)

        with patch("httpx.AsyncClient", return_value=_mock_async_client(post)):
            await OAuthClient(token_url="https://auth.test/token", client_id="cid").refresh_token(
                "rt"
            )

        args, kwargs = post.call_args
        assert args == ("https://auth.test/token",)
        assert kwargs["data"]["client_id"] == "cid"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 429, 500, 503])
    async def test_non_success_status(self, status: int) -> None:
        resp = _mock_http_response(status, text='{"error": "invalid_grant"}')
        post = AsyncMock(return_value=resp)

        with (
            patch("httpx.AsyncClient", return_value=_mock_async_client(post)),
            pytest.raises(RefreshError) as exc_info,
        ):
            await OAuthClient().refresh_token("rt-old")

        assert exc_info.value.status_code == status
        assert exc_info.value.body == '{"error": "invalid_grant"}'
        assert str(status) in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        post = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))

        with (
            patch("httpx.AsyncClient", return_value=_mock_async_client(post)),
            pytest.raises(RefreshTimeoutError),
        ):
            await OAuthClient().refresh_token("rt-old")

    @pytest.mark.asyncio
    async def test_timeout_is_refresh_error(self) -> None:
        post = AsyncMock(side_effect=httpx.ConnectTimeout("timed out"))

        with (
            patch("httpx.AsyncClient", return_value=_mock_async_client(post)),
            pytest.raises(RefreshError) as exc_info,
        ):
            await OAuthClient().refresh_token("rt-old")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_network_error(self) -> None:
        post = AsyncMock(side_effect=httpx.ConnectError("connection refused"))

        with (
            patch("httpx.AsyncClient", return_value=_mock_async_client(post)),
            pytest.raises(RefreshError) as exc_info,
        ):
            await OAuthClient().refresh_token("rt-old")

        assert not isinstance(exc_info.value, RefreshTimeoutError)

    @pytest.mark.asyncio
    async def test_invalid_json_body(self) -> None:
        resp = _mock_http_response(200, text="<html>")
        resp.json.side_effect = ValueError("Expecting value")
        post = AsyncMock(return_value=resp)

        with (
            patch("httpx.AsyncClient", return_value=_mock_async_client(post)),
            pytest.raises(RefreshError),
        ):
            await OAuthClient().refresh_token("rt-old")

    @pytest.mark.asyncio
    async def test_missing_fields(self) -> None:
        resp = _mock_http_response(200, {"access_token": "a"})
        post = AsyncMock(return_value=resp)

        with (
            patch("httpx.AsyncClient", return_value=_mock_async_client(post)),
            pytest.raises(RefreshError, match="Malformed"),
        ):
            await OAuthClient().refresh_token("rt-old")


class TestTokenResponse:
    """Tests for TokenResponse.from_api()."""

    def test_numeric_string_expires_in(self) -> None:
        tokens = TokenResponse.from_api(
            {"access_token": "a", "refresh_token": "r", "expires_in": "120"}
        )
        assert tokens.expires_in == 120

    def test_not_an_object(self) -> None:
        with pytest.raises(RefreshError):
            TokenResponse.from_api(["a", "r", 1])

    def test_non_string_token(self) -> None:
        with pytest.raises(RefreshError):
            TokenResponse.from_api({"access_token": 1, "refresh_token": "r", "expires_in": 1})

    @pytest.mark.parametrize("expires_in", [float("inf"), float("-inf"), 1e400])
    def test_non_finite_expires_in(self, expires_in) -> None:
        with pytest.raises(RefreshError, match="Malformed"):
            TokenResponse.from_api(
                {"access_token": "a", "refresh_token": "r", "expires_in": expires_in}
            )

    @pytest.mark.parametrize("expires_in", [0, -60])
    def test_non_positive_expires_in(self, expires_in) -> None:
        with pytest.raises(RefreshError, match="non-positive"):
            TokenResponse.from_api(
                {"access_token": "a", "refresh_token": "r", "expires_in": expires_in}
            )


class TestRefreshInfiniteLifetime:
    """A 200 body with an infinite lifetime must not abort setup."""

    @pytest.mark.asyncio
    async def test_refresh_raises_refresh_error(self) -> None:
        resp = _mock_http_response(
            200, {"access_token": "a", "refresh_token": "r", "expires_in": float("inf")}
        )
        post = AsyncMock(return_value=resp)

        with (
            patch("httpx.AsyncClient", return_value=_mock_async_client(post)),
            pytest.raises(RefreshError),
        ):
            await OAuthClient().refresh_token("rt-old")

    @pytest.mark.asyncio
    async def test_setup_keeps_original_tokens(self, store) -> None:
        from claude_auth_setup.auth.manager import CredentialManager

        resp = _mock_http_response(
            200, {"access_token": "a", "refresh_token": "r", "expires_in": float("inf")}
        )
        post = AsyncMock(return_value=resp)
        manager = CredentialManager(store, oauth_client=OAuthClient(), clock=lambda: 1000)

        with patch("httpx.AsyncClient", return_value=_mock_async_client(post)):
            result = await manager.setup_credentials("orig-a", "orig-r", "0")

        assert result.refreshed is False
        assert json.loads(store.credentials_path.read_text()) == {
            "access_token": "orig-a",
            "refresh_token": "orig-r",
            "expires_at": 0,
        }
