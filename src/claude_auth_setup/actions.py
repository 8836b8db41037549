"""GitHub Actions workflow command helpers."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

from claude_auth_setup.logging import get_logger

log = get_logger("claude_auth_setup.actions")


def add_mask(value: str, stream: TextIO | None = None) -> None:
    """Ask the runner to redact *value* from all later log output."""
    if not value:
        return
    out = stream or sys.stdout
    out.write(f"::add-mask::{value}\n")
    out.flush()


def set_output(name: str, value: str, path: str | Path | None) -> bool:
    """Append a step output to the ``GITHUB_OUTPUT`` file.

    Returns False without writing when no output file is configured,
    which is the case when running outside a workflow.
    """
    if not path:
        log.debug("actions_output_skipped", name=name)
        return False
    if "\n" in value:
        raise ValueError(f"Output {name!r} must be a single line")
    with Path(path).open("a", encoding="utf-8") as f:
        f.write(f"{name}={value}\n")
    return True
