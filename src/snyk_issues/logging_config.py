"""Structured logging configuration for the Snyk issues client.

- JSON structured logging with StructuredFormatter
- Logger hierarchy under the snyk_issues namespace
- Environment variable control (SNYK_LOG_LEVEL, SNYK_LOG_FORMAT)

The library never installs handlers on import. Hosts call
configure_logging(config=get_config()) once at startup, or hand their own
logger to SnykClient.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

from .config import SnykConfig

LOGGER_NAME = "snyk_issues"

# Keys whose values are redacted from structured log context
SENSITIVE_KEYS = {
    "password", "token", "secret", "apikey", "api_key",
    "authorization", "credential", "auth", "key", "bearer",
}

# Attributes every LogRecord carries; anything else came in through extra=
_STANDARD_FIELDS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
}


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter.

    Outputs logs in JSON format with:
    - timestamp: UTC ISO 8601 format with 'Z' suffix
    - level: Log level name (INFO, ERROR, etc.)
    - logger: Logger name
    - message: Log message
    - context: Extras dict merged from LogRecord attributes

    Sensitive keys (token, authorization, api_key, ...) are redacted.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            k: ("[REDACTED]" if k.lower() in SENSITIVE_KEYS else v)
            for k, v in record.__dict__.items()
            if k not in _STANDARD_FIELDS and not k.startswith("_")
        }

        if extras:
            log_data["context"] = extras

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter, used when SNYK_LOG_FORMAT=text."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def configure_logging(
    level: Optional[str] = None,
    log_format: Optional[str] = None,
    config: Optional[SnykConfig] = None,
) -> logging.Logger:
    """Configure logging for all snyk_issues loggers.

    Precedence: explicit arguments, then ``config`` (which has already read
    SNYK_LOG_LEVEL / SNYK_LOG_FORMAT and .env), then the bare environment
    variables.

    Args:
        level: Optional log level override. Falls back to
               config.snyk_log_level or SNYK_LOG_LEVEL (default: INFO).
        log_format: Optional format override (json, text). Falls back to
                    config.snyk_log_format or SNYK_LOG_FORMAT (default: json).
        config: Loaded settings, e.g. get_config()

    Returns:
        The configured package logger.
    """
    if level is None:
        level = (
            config.snyk_log_level
            if config is not None
            else os.getenv("SNYK_LOG_LEVEL", "INFO")
        )

    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format is None:
        log_format = (
            config.snyk_log_format
            if config is not None
            else os.getenv("SNYK_LOG_FORMAT", "json")
        )

    if log_format.lower() == "text":
        formatter: logging.Formatter = TextFormatter()
    else:
        formatter = StructuredFormatter()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Idempotent: only add a handler the first time
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    else:
        for handler in logger.handlers:
            handler.setFormatter(formatter)

    logger.propagate = False
    return logger
