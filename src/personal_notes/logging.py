"""Logging configuration for the personal notes service.

structlog renders every event through stdlib handlers: stdout always, plus a
rotating JSON file when ``LOG_TO_FILE`` is set.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

from personal_notes.config import Settings, get_settings

# Event keys that may carry key material or note plaintext
REDACTED_KEYS = frozenset({"encryption_key", "key", "subject", "content", "tags", "name", "text"})


def redact_sensitive(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor replacing sensitive values with a marker."""
    for k in REDACTED_KEYS.intersection(event_dict):
        event_dict[k] = "[redacted]"
    return event_dict


def _formatter(renderer: Any) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer]
    )


def _open_log_file(settings: Settings) -> RotatingFileHandler | None:
    """Create the rotating file handler, or None if the log directory is unusable."""
    try:
        Path(settings.log_directory).mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            filename=settings.log_file_path,
            maxBytes=settings.log_file_max_bytes,
            backupCount=settings.log_file_backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        # Console logging still works; structlog is not configured yet
        print(f"Warning: Could not set up file logging: {e}", file=sys.stderr)
        return None


def setup_logging() -> None:
    """Configure structured logging with console and optional file outputs."""
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", level=log_level, handlers=[])
    # basicConfig is a no-op when the root logger already has handlers
    logging.root.setLevel(log_level)

    console_renderer = (
        structlog.dev.ConsoleRenderer(colors=True)
        if settings.is_development
        else structlog.processors.JSONRenderer()
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(_formatter(console_renderer))
    logging.root.addHandler(console_handler)

    if settings.log_to_file:
        file_handler = _open_log_file(settings)
        if file_handler is not None:
            # Files are always JSON
            file_handler.setLevel(log_level)
            file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
            logging.root.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            redact_sensitive,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # aiohttp's access log duplicates our own request events
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]
