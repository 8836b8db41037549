"""OAuth credential lifecycle for the assistant.

Exports:
- CredentialManager / setup_auth: settings + credential setup
- ConfigStore: settings.json and .credentials.json on disk
- OAuthClient: refresh-token exchange
- SecretPropagator: repository secret updates
"""

from claude_auth_setup.auth.errors import (
    AuthSetupError,
    RefreshError,
    RefreshTimeoutError,
    SecretUpdateError,
    SettingsParseError,
)
from claude_auth_setup.auth.manager import (
    CredentialManager,
    is_token_near_expiration,
    parse_expires_at,
    setup_auth,
)
from claude_auth_setup.auth.models import Credentials, SetupResult, TokenResponse
from claude_auth_setup.auth.oauth import OAuthClient
from claude_auth_setup.auth.secrets import SecretPropagator
from claude_auth_setup.auth.store import ConfigStore

__all__ = [
    "AuthSetupError",
    "ConfigStore",
    "CredentialManager",
    "Credentials",
    "OAuthClient",
    "RefreshError",
    "RefreshTimeoutError",
    "SecretPropagator",
    "SecretUpdateError",
    "SettingsParseError",
    "SetupResult",
    "TokenResponse",
    "is_token_near_expiration",
    "parse_expires_at",
    "setup_auth",
]
