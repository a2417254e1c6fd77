"""JSON logging for the hotel bot."""

import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from pathlib import Path

from .config import DEFAULT_LOG_PATH

# Chatty at INFO: one line per HTTP request or SQL statement
QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite", "anthropic")

_RECORD_FIELDS = {
    "levelname": "level",
    "name": "logger",
    "module": "module",
    "funcName": "function",
    "lineno": "line",
}

# Turn-scoped fields passed via extra=... and lifted to the top level
TURN_FIELDS = ("address", "dialog")


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    ``extra={"address": ..., "dialog": ...}`` become top-level keys so a
    conversation can be followed with a plain grep; anything else goes in
    ``extra={"context": {...}}``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "message": record.getMessage(),
        }
        for attr, key in _RECORD_FIELDS.items():
            entry[key] = getattr(record, attr)

        for key in TURN_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


def build_logging_config(log_level: str, log_file: str | None) -> dict:
    """dictConfig for stdout plus an optional rotating file."""
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": 10 * 1024 * 1024,  # 10 MB
            "backupCount": 5,
            "formatter": "json",
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"json": {"()": JSONFormatter}},
        "handlers": handlers,
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        "root": {"level": log_level.upper(), "handlers": list(handlers)},
    }


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
    to_file: bool = True,
) -> None:
    """
    Configure logging for the process.

    Args:
        log_level: Defaults to the LOG_LEVEL env var or INFO.
        log_file: Defaults to 04_logs/app.log.
        to_file: Set False to log to stdout only (containers).
    """
    log_level = log_level or os.getenv("LOG_LEVEL", "INFO")

    if to_file:
        log_file = log_file or str(DEFAULT_LOG_PATH)
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    else:
        log_file = None

    logging.config.dictConfig(build_logging_config(log_level, log_file))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
