"""Structured logging configuration.

Log records from the ``agentverse`` logger tree are written as one JSON object
per line.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Optional, Union

LOGGER_NAME = "agentverse"

# Attributes present on every LogRecord; anything else came from ``extra=``.
_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """Render a log record as JSON.

    Each entry carries ``timestamp``, ``level``, ``logger`` and ``message``;
    fields passed through ``extra=`` are collected under ``extra`` and an
    exception traceback, if any, under ``exception``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = {
            key: value for key, value in vars(record).items() if key not in _RESERVED
        }
        if extra:
            entry["extra"] = extra
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Attach JSON handlers to the package logger, replacing existing ones."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers = []

    formatter = StructuredFormatter()
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
