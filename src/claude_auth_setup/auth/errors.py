"""Exceptions raised while setting up assistant credentials."""

from __future__ import annotations


class AuthSetupError(Exception):
    """Base exception for credential setup errors."""

    pass


class SettingsParseError(AuthSetupError):
    """The existing settings file could not be read or decoded."""

    pass


class RefreshError(AuthSetupError):
    """The OAuth refresh exchange did not produce new tokens."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class RefreshTimeoutError(RefreshError):
    """The token endpoint did not answer within the configured timeout."""

    pass


class SecretUpdateError(AuthSetupError):
    """Rotated tokens could not be pushed to the repository secret store."""

    pass
