"""Credential lifecycle for the assistant's OAuth login.

Typical flow::

    store = ConfigStore(resolve_config_dir(os.environ))
    manager = CredentialManager(store, repository="owner/repo")
    result = await setup_auth(manager, access_token, refresh_token, expires_at)

``setup_auth`` writes ``settings.json`` first, then the credential file.
Tokens expiring within the next hour are refreshed once before being
written.  Refresh and propagation failures are logged and never abort
setup; only settings errors are fatal.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from typing import Any

from claude_auth_setup import actions
from claude_auth_setup.auth.errors import RefreshError
from claude_auth_setup.auth.models import Credentials, SetupResult
from claude_auth_setup.auth.oauth import OAuthClient
from claude_auth_setup.auth.secrets import SecretPropagator
from claude_auth_setup.auth.store import ConfigStore
from claude_auth_setup.logging import get_logger

log = get_logger("claude_auth_setup.auth.manager")

EXPIRY_BUFFER_MS = 60 * 60 * 1000
DEFAULT_LIFETIME_MS = 24 * 60 * 60 * 1000

# Plain ASCII decimal, optional minus; no underscores, plus sign or Unicode digits
_EPOCH_MS_RE = re.compile(r"-?[0-9]+")


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def parse_expires_at(raw: str | None, now: int) -> int:
    """Parse an epoch-ms expiry, falling back to 24 hours from *now*."""
    if raw is not None:
        value = raw.strip()
        if _EPOCH_MS_RE.fullmatch(value):
            return int(value)
        log.warning("expires_at_invalid", value=raw)
    return now + DEFAULT_LIFETIME_MS


def is_token_near_expiration(expires_at: int, now: int) -> bool:
    """True when the token expires within the next 60 minutes (or already has)."""
    return now + EXPIRY_BUFFER_MS >= expires_at


class CredentialManager:
    """Keeps the on-disk OAuth credentials usable for a full assistant run."""

    def __init__(
        self,
        store: ConfigStore,
        oauth_client: OAuthClient | None = None,
        repository: str | None = None,
        propagator_factory: Callable[[str], SecretPropagator] = SecretPropagator,
        clock: Callable[[], int] = now_ms,
        mask_rotated_tokens: bool = False,
    ) -> None:
        self._store = store
        self._oauth = oauth_client or OAuthClient()
        self._repository = repository
        self._propagator_factory = propagator_factory
        self._clock = clock
        self._mask_rotated_tokens = mask_rotated_tokens

    @property
    def store(self) -> ConfigStore:
        return self._store

    def ensure_settings(self) -> dict[str, Any]:
        """Write ``settings.json`` with the MCP servers flag enabled."""
        return self._store.ensure_settings()

    async def setup_credentials(
        self,
        access_token: str | None,
        refresh_token: str | None,
        expires_at_raw: str | None = None,
        secret_updater_token: str | None = None,
    ) -> SetupResult:
        """Write usable credentials, refreshing them first if they are about to expire.

        Args:
            access_token: Current OAuth access token.
            refresh_token: Current OAuth refresh token.
            expires_at_raw: Access token expiry in epoch ms, as a string.
            secret_updater_token: Token for pushing rotated values to
                repository secrets; propagation is skipped without it.

        Returns:
            What happened.  ``configured`` is False when OAuth is not in use.
        """
        if not access_token or not refresh_token:
            log.info("oauth_setup_skipped", reason="no_credentials")
            return SetupResult()

        log.info("oauth_setup_started")
        result = SetupResult(configured=True)

        now = self._clock()
        expires_at = parse_expires_at(expires_at_raw, now)
        credentials = Credentials(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=expires_at,
        )

        if is_token_near_expiration(expires_at, now):
            log.info("oauth_token_near_expiration", expires_at=expires_at)
            try:
                tokens = await self._oauth.refresh_token(refresh_token)
            except RefreshError as e:
                log.warning(
                    "oauth_refresh_failed_using_provided_tokens",
                    error=str(e),
                    status=e.status_code,
                )
            else:
                credentials = Credentials(
                    access_token=tokens.access_token,
                    refresh_token=tokens.refresh_token,
                    # expiry counts from the refresh response
                    expires_at=self._clock() + tokens.expires_in * 1000,
                )
                result.refreshed = True
                if self._mask_rotated_tokens:
                    actions.add_mask(tokens.access_token)
                    actions.add_mask(tokens.refresh_token)
                log.info("oauth_token_refreshed", expires_at=credentials.expires_at)
        else:
            log.info("oauth_token_valid", expires_at=expires_at)

        self._store.write_credentials(credentials)
        result.expires_at = credentials.expires_at

        if secret_updater_token and self._repository:
            result.propagated = await self._propagate(secret_updater_token, credentials)

        return result

    async def _propagate(self, secret_updater_token: str, credentials: Credentials) -> bool:
        propagator = self._propagator_factory(secret_updater_token)
        try:
            return await propagator.propagate_secrets(
                self._repository,
                credentials.access_token,
                credentials.refresh_token,
            )
        except Exception as e:
            log.warning("secret_propagation_failed", error=str(e))
            return False


async def setup_auth(
    manager: CredentialManager,
    access_token: str | None = None,
    refresh_token: str | None = None,
    expires_at: str | None = None,
    github_pat: str | None = None,
) -> SetupResult:
    """Prepare settings and credentials for the assistant process.

    Raises:
        Exception: Anything that prevents writing the settings file.
    """
    log.info("auth_setup_started")
    try:
        manager.ensure_settings()
        result = await manager.setup_credentials(
            access_token,
            refresh_token,
            expires_at,
            github_pat,
        )
    except Exception as e:
        log.error("auth_setup_failed", error=str(e))
        raise
    log.info("auth_setup_completed", **result.to_dict())
    return result
