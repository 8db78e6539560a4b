"""Logging configuration utilities for safepaths."""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from safepaths.domain.context_id import ROOT_LOGGER_NAME, ContextLoggerAdapter

LOG_FORMAT = "%(asctime)s %(levelname)s [%(context_id)s] %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5
MAX_LOGGED_FRAGMENT = 200

_CONTROL_ESCAPES = {i: f"\\x{i:02x}" for i in range(32)}
_CONTROL_ESCAPES.update({0x7F: "\\x7f", ord("\n"): "\\n", ord("\r"): "\\r"})


def scrub_for_log(
    value: Optional[str], limit: int = MAX_LOGGED_FRAGMENT
) -> Optional[str]:
    """Make an untrusted path fragment safe to embed in logs and messages.

    Control characters (NUL, newlines, escape sequences) are rendered as
    escapes so a rejected fragment cannot forge log lines, and long values
    are truncated with a marker carrying the original length.
    """
    if not value:
        return value

    escaped = value.translate(_CONTROL_ESCAPES)
    if len(escaped) > limit:
        return f"{escaped[:limit]}...[{len(value)} chars]"
    return escaped


class ContextIdFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """Ensure context_id field exists in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "context_id"):
            record.context_id = "-"
        return True


class JsonFormatter(logging.Formatter):
    """JSON formatter with stable key ordering for structured logging."""

    EXTRA_KEYS = (
        "rule",
        "fragment",
        "pattern",
        "extension",
        "path_name",
        "path",
        "base_path",
        "preset",
        "presets",
        "entries",
        "strategy",
        "policy",
        "error_type",
        "destination",
        "use_json",
        "log_level",
    )

    def __init__(self, datefmt: Optional[str] = None):
        super().__init__(datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON with stable key ordering."""
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "context_id": getattr(record, "context_id", "-"),
            "component": getattr(record, "component", "unknown"),
            "message": record.getMessage(),
        }

        if hasattr(record, "event"):
            log_data["event"] = record.event

        for key in self.EXTRA_KEYS:
            if hasattr(record, key):
                value = getattr(record, key)
                if isinstance(value, str):
                    value = scrub_for_log(value)
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, sort_keys=True)


def _resolve_level(level_name: str) -> int:
    """Translate text level names into logging module numeric levels."""
    level = getattr(logging, level_name.upper(), None)
    if isinstance(level, int):
        return level
    return logging.INFO


def _build_handler(
    destination: Optional[str], level: int, use_json: bool = True
) -> logging.Handler:
    """Create a stdout, stderr or rotating file handler for the logger."""
    if destination and destination.lower() == "stderr":
        handler = logging.StreamHandler(sys.stderr)
    elif destination and destination.lower() != "stdout":
        target_path = Path(destination)
        target_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            target_path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT
        )
    else:
        handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    if use_json:
        handler.setFormatter(JsonFormatter(DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    handler.addFilter(ContextIdFilter())
    return handler


def configure_logging(
    level: str = "INFO", destination: Optional[str] = None, use_json: bool = True
) -> ContextLoggerAdapter:
    """Configure and return the package logger with the requested handler."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    numeric_level = _resolve_level(level)
    logger.setLevel(numeric_level)
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    handler = _build_handler(destination, numeric_level, use_json)
    logger.addHandler(handler)

    adapter = ContextLoggerAdapter(logger, {})
    adapter.info(
        "Logging configured",
        extra={
            "event": "logging_configured",
            "destination": destination or "stdout",
            "use_json": use_json,
            "log_level": logging.getLevelName(numeric_level),
        },
    )
    return adapter
