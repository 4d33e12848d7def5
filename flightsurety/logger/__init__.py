"""Logging setup shared by the FlightSurety components.

Modules log through ``logging.getLogger(__name__)``; this package only wires a
console handler with either a plain or a JSON line format.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Optional

from flightsurety.config import Settings, get_settings

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """Install a console handler on the ``flightsurety`` logger.

    Calling it again replaces the handler rather than stacking a second one.

    Args:
        settings: Settings providing ``log_level`` and ``log_format``.

    Returns:
        The configured package logger.
    """
    settings = settings or get_settings()
    logger = logging.getLogger("flightsurety")
    for handler in list(logger.handlers):
        if getattr(handler, "_flightsurety", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._flightsurety = True  # type: ignore[attr-defined]
    if settings.log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(settings.log_level.upper())
    return logger


__all__ = ["JsonFormatter", "configure_logging", "TEXT_FORMAT"]
