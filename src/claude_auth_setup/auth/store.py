"""On-disk settings and credential files for the assistant.

Both files live in the directory returned by
:func:`claude_auth_setup.config.resolve_config_dir`.  Every write replaces
the whole file: content goes to a temporary file in the same directory
which is then renamed over the target, so readers never observe a partial
write.  There is no locking between processes; the last writer wins.
"""

from __future__ import annotations

import contextlib
import json
import os
import stat
import tempfile
from pathlib import Path
from typing import Any

from claude_auth_setup.auth.errors import SettingsParseError
from claude_auth_setup.auth.models import MCP_SERVERS_FLAG, Credentials
from claude_auth_setup.config import CREDENTIALS_FILENAME, SETTINGS_FILENAME
from claude_auth_setup.logging import get_logger

log = get_logger("claude_auth_setup.auth.store")

CREDENTIALS_FILE_MODE = 0o600
DEFAULT_FILE_MODE = 0o666


def _umask_default_mode() -> int:
    """Mode a plain open() would give a new file under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return DEFAULT_FILE_MODE & ~umask


class ConfigStore:
    """Reads and writes ``settings.json`` and ``.credentials.json``."""

    def __init__(self, config_dir: Path) -> None:
        self._config_dir = Path(config_dir)

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def settings_path(self) -> Path:
        return self._config_dir / SETTINGS_FILENAME

    @property
    def credentials_path(self) -> Path:
        return self._config_dir / CREDENTIALS_FILENAME

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def load_settings(self) -> dict[str, Any]:
        """Read the settings file.

        Returns an empty mapping when the file does not exist.

        Raises:
            SettingsParseError: The file exists but is unreadable, not JSON,
                or not a JSON object.
        """
        if not self.settings_path.exists():
            return {}
        try:
            data = json.loads(self.settings_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SettingsParseError(f"Cannot read {self.settings_path}: {e}") from e
        if not isinstance(data, dict):
            raise SettingsParseError(f"{self.settings_path} does not contain a JSON object")
        return data

    def ensure_settings(self) -> dict[str, Any]:
        """Make sure the settings file enables all project MCP servers.

        Other keys already present are kept as they are.  A malformed file
        is replaced.  Errors while writing propagate to the caller.
        """
        log.info("settings_setup_started", config_dir=str(self._config_dir))

        if not self._config_dir.exists():
            self._config_dir.mkdir(parents=True, exist_ok=True)
            log.info("config_dir_created", config_dir=str(self._config_dir))

        try:
            settings = self.load_settings()
            if settings:
                log.info("settings_loaded", keys=len(settings))
        except SettingsParseError as e:
            log.warning("settings_parse_failed", error=str(e))
            settings = {}

        settings[MCP_SERVERS_FLAG] = True

        self._write_json(self.settings_path, settings)
        log.info("settings_written", path=str(self.settings_path))
        return settings

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def load_credentials(self) -> Credentials | None:
        """Read the stored credential record, or None if absent or unusable."""
        if not self.credentials_path.exists():
            return None
        try:
            data = json.loads(self.credentials_path.read_text(encoding="utf-8"))
            return Credentials.from_dict(data)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            log.warning("credentials_parse_failed", error=str(e))
            return None

    def write_credentials(self, credentials: Credentials) -> Path:
        """Overwrite the credential file with *credentials*."""
        self._config_dir.mkdir(parents=True, exist_ok=True)
        self._write_json(self.credentials_path, credentials.to_dict(), mode=CREDENTIALS_FILE_MODE)
        log.info("credentials_written", path=str(self.credentials_path))
        return self.credentials_path

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _write_json(self, path: Path, data: dict[str, Any], mode: int | None = None) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            if mode is None:
                # mkstemp creates 0600; keep what the file had, or what open() would give
                try:
                    mode = stat.S_IMODE(path.stat().st_mode)
                except FileNotFoundError:
                    mode = _umask_default_mode()
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise
