"""Structured logging configuration for applications using the detector.

The library itself only logs through module loggers; call `setup_logging()`
from an application entry point to get JSON lines on stdout.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
from datetime import datetime, timezone


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    `timestamp` is the record's creation time, not the time of formatting.
    Event context attached by `LoggingObserver` (or any `extra={"context": ...}`)
    is emitted under `context`; values that are not JSON-native (targets,
    exceptions, paths) fall back to their `repr`.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        context = getattr(record, "context", None)
        if context is not None:
            payload["context"] = context

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=repr)


def setup_logging(log_level: str | None = None) -> None:
    """
    Setup structured console logging.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
                   Defaults to DETECTOR_LOG_LEVEL env var or INFO.
    """
    if log_level is None:
        log_level = os.getenv("DETECTOR_LOG_LEVEL") or "INFO"

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "detector.logging_config.JSONFormatter",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {
            "level": log_level.upper(),
            "handlers": ["console"],
        },
    }

    logging.config.dictConfig(logging_config)

