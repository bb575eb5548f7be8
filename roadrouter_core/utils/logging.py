"""Logging setup.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Optional

PACKAGE_LOGGER = "roadrouter_core"

_installed_handler: Optional[logging.Handler] = None

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_logging(
    level: str = "INFO",
    fmt: str = "text",
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Log level name
        fmt: "text" or "json"
        handler: Handler to install (default: stderr stream handler)

    Returns:
        The configured package logger
    """
    global _installed_handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level.upper())

    handler = handler or logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    if _installed_handler is not None:
        logger.removeHandler(_installed_handler)
    logger.addHandler(handler)
    _installed_handler = handler

    return logger


__all__ = [
    "JSONFormatter",
    "configure_logging",
]
