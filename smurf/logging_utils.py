"""Logging configuration helpers for smurf."""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

_LOGGER_NAME = "smurf"
SMURF_LOG_FILE_ENV = "SMURF_LOG_FILE"
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_RESERVED_RECORD_FIELDS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Return the ``extra={...}`` fields attached to a log record."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_RECORD_FIELDS and not key.startswith("_")
    }


class JsonLogFormatter(logging.Formatter):
    """Format log records as JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        """Serialize a log record in JSON format."""
        payload: dict[str, Any] = {
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = record_context(record)
        if context:
            payload["context"] = context
        return json.dumps(payload, default=str)


class ContextTextFormatter(logging.Formatter):
    """Plain-text formatter that appends record context as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={value!r}" for key, value in context.items())
        return f"{line} [{pairs}]"


def _close_handlers(logger: logging.Logger) -> None:
    """Detach and close all handlers currently bound to the logger."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def default_log_file() -> Path:
    """Resolve the log path from SMURF_LOG_FILE or the user's home directory."""
    env_value = os.environ.get(SMURF_LOG_FILE_ENV)
    if env_value:
        return Path(env_value)
    return Path.home() / ".smurf" / "smurf.log"


def configure_logging(
    *,
    log_file: Path,
    verbose: bool,
    json_format: bool = False,
) -> logging.Logger:
    """Configure file logging for the smurf CLI and return the logger.

    Logging is reconfigured on every CLI invocation and the target file is
    truncated so each run has an isolated log history.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    _close_handlers(logger)

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    log_path = log_file.expanduser().resolve()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    if json_format:
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(ContextTextFormatter(_TEXT_FORMAT))
    logger.addHandler(handler)
    return logger


def get_logger() -> logging.Logger:
    """Return the smurf logger (configured or with null handler)."""
    logger = logging.getLogger(_LOGGER_NAME)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger
