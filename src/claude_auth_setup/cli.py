"""CLI for the assistant credential setup step."""

from __future__ import annotations

import asyncio
import sys
from datetime import UTC, datetime

import click  # type: ignore[import-not-found]

from claude_auth_setup.actions import set_output
from claude_auth_setup.auth.errors import SettingsParseError
from claude_auth_setup.auth.manager import (
    CredentialManager,
    is_token_near_expiration,
    now_ms,
    setup_auth,
)
from claude_auth_setup.auth.models import MCP_SERVERS_FLAG
from claude_auth_setup.auth.oauth import OAuthClient
from claude_auth_setup.auth.store import ConfigStore
from claude_auth_setup.config import Settings, get_settings
from claude_auth_setup.logging import setup_logging


def _build_manager(settings: Settings) -> CredentialManager:
    return CredentialManager(
        ConfigStore(settings.config_dir),
        oauth_client=OAuthClient(
            token_url=settings.oauth_token_url,
            client_id=settings.oauth_client_id,
            timeout=settings.oauth_timeout,
        ),
        repository=settings.github_repository,
        mask_rotated_tokens=settings.github_actions,
    )


def _format_ms(value: int) -> str:
    try:
        return datetime.fromtimestamp(value / 1000, tz=UTC).isoformat()
    except (OSError, OverflowError, ValueError):
        return f"{value} ms (out of range)"


@click.group()  # type: ignore[misc]
def main() -> None:
    """Prepare assistant settings and OAuth credentials for a workflow run."""


@main.command()  # type: ignore[misc]
def setup() -> None:
    """Write settings and credentials from the step environment."""
    settings = get_settings()
    setup_logging(settings)
    manager = _build_manager(settings)

    try:
        result = asyncio.run(
            setup_auth(
                manager,
                access_token=Settings.reveal(settings.claude_access_token),
                refresh_token=Settings.reveal(settings.claude_refresh_token),
                expires_at=settings.claude_expires_at,
                github_pat=Settings.reveal(settings.github_pat),
            )
        )
    except Exception as e:
        click.echo(f"Error: Failed to set up authentication: {e}", err=True)
        sys.exit(1)

    set_output("token_refreshed", "true" if result.refreshed else "false", settings.github_output)
    if result.expires_at is not None:
        set_output("expires_at", str(result.expires_at), settings.github_output)


@main.command()  # type: ignore[misc]
def status() -> None:
    """Show the stored configuration without revealing tokens."""
    settings = get_settings()
    store = ConfigStore(settings.config_dir)

    click.echo(f"Config dir:  {store.config_dir}")

    try:
        flag = store.load_settings().get(MCP_SERVERS_FLAG) is True
        click.echo(f"MCP servers: {'enabled' if flag else 'NOT ENABLED'}")
    except SettingsParseError:
        click.echo("MCP servers: settings file unreadable")

    credentials = store.load_credentials()
    if credentials is None:
        click.echo("Credentials: none")
        return

    near = is_token_near_expiration(credentials.expires_at, now_ms())
    click.echo(f"Credentials: {store.credentials_path}")
    click.echo(f"  Expires at: {_format_ms(credentials.expires_at)}")
    click.echo(f"  Refresh due: {'yes' if near else 'no'}")
