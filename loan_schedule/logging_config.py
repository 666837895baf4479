"""Logging configuration for the loan schedule tools.

Modules log through ``logging.getLogger(__name__)``; the command-line and web
front ends call :func:`setup_logging` once at startup to attach a handler to
the ``loan_schedule`` logger, either with a plain text or a JSON format.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

LOGGER_NAME = "loan_schedule"
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.module,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: str = "WARNING", json_output: bool = False) -> logging.Logger:
    """Configure and return the package logger.

    Existing handlers are removed first so repeated calls do not duplicate
    output.

    Raises
    ------
    ValueError
        If ``level`` is not a known logging level name.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if json_output else logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(numeric_level)
    logger.propagate = False
    return logger
