"""Logging configuration for the credential setup step."""

import logging
import sys

import structlog
from structlog.typing import Processor

from claude_auth_setup.config import Settings, get_settings

TOKEN_PREVIEW_CHARS = 10

# Applied to every event before it is handed to the stdlib handler
_PRE_CHAIN: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _renderer(settings: Settings) -> Processor:
    """Readable colours for local runs, one JSON object per line on runners."""
    if settings.is_development:
        return structlog.dev.ConsoleRenderer(colors=True)
    return structlog.processors.JSONRenderer()


def setup_logging(settings: Settings | None = None) -> None:
    """Send structlog events through a single stdout handler."""
    settings = settings or get_settings()
    level = logging.getLevelNamesMapping()[settings.log_level]

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(settings),
            ],
        )
    )
    logging.root.handlers = [handler]
    logging.root.setLevel(level)

    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def mask_token(token: str) -> str:
    """Return a log-safe preview of a secret value."""
    return f"{token[:TOKEN_PREVIEW_CHARS]}..."
