"""Propagation of rotated tokens to the repository secret store.

Writing a GitHub Actions secret requires sealing the value with the
repository's libsodium public key.  That encryption is not available in
this package, so propagation stops after validating its inputs and
reports itself as not implemented instead of pretending to succeed.
"""

from __future__ import annotations

from claude_auth_setup.auth.errors import SecretUpdateError
from claude_auth_setup.logging import get_logger, mask_token

log = get_logger("claude_auth_setup.auth.secrets")

ACCESS_TOKEN_SECRET = "CLAUDE_ACCESS_TOKEN"
REFRESH_TOKEN_SECRET = "CLAUDE_REFRESH_TOKEN"


class SecretPropagator:
    """Pushes rotated OAuth tokens into repository secrets."""

    def __init__(self, github_token: str) -> None:
        self._github_token = github_token

    async def propagate_secrets(
        self,
        repository: str | None,
        access_token: str,
        refresh_token: str,
    ) -> bool:
        """Update the token secrets of *repository*.

        Returns True only when the secrets were actually written.

        Raises:
            SecretUpdateError: No repository identifier was given.
        """
        if not repository:
            raise SecretUpdateError("GITHUB_REPOSITORY environment variable not set")

        log.info(
            "secret_propagation_started",
            repository=repository,
            secrets={
                ACCESS_TOKEN_SECRET: mask_token(access_token),
                REFRESH_TOKEN_SECRET: mask_token(refresh_token),
            },
            github_token=mask_token(self._github_token),
        )
        # TODO: seal values with the repo public key (GET .../actions/secrets/public-key)
        # and PUT .../actions/secrets/{name} once a libsodium binding is a dependency.
        log.warning("secret_propagation_not_implemented", repository=repository)
        return False
