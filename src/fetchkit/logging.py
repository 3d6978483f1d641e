"""Logging setup for the fetchkit logger hierarchy.

Library modules log through stdlib loggers named ``fetchkit.<area>`` and never
install handlers themselves. Applications opt in with configure_logging().

Quick Start:
    >>> from fetchkit.logging import configure_logging
    >>> configure_logging(format="json", level="DEBUG")
    >>> # => {"timestamp": "...", "level": "info", "logger": "fetchkit.retry", "event": "Retry 1/3 after 1000ms (status 503)"}
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import TextIO

import orjson

from fetchkit.config import get_settings

ROOT_LOGGER = "fetchkit"

_HANDLER_MARK = "_fetchkit_handler"


class JsonFormatter(logging.Formatter):
    """JSON Lines output for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(payload, option=orjson.OPT_NON_STR_KEYS).decode()


def _text_formatter(include_timestamps: bool) -> logging.Formatter:
    fmt = "%(levelname)s %(name)s: %(message)s"
    return logging.Formatter(f"%(asctime)s {fmt}" if include_timestamps else fmt)


def configure_logging(
    level: str | None = None,
    format: str | None = None,  # noqa: A002 - matches LoggingSettings.format
    *,
    output: TextIO | None = None,
) -> logging.Logger:
    """Attach a single stream handler to the fetchkit logger.

    Unset arguments fall back to LoggingSettings (FETCHKIT_LOG_*). Calling
    again replaces the previous handler.

    Returns:
        The configured ``fetchkit`` logger
    """
    settings = get_settings().logging
    level = (level or settings.level).upper()
    format = format or settings.format

    match format:
        case "json": formatter: logging.Formatter = JsonFormatter()
        case "text": formatter = _text_formatter(settings.include_timestamps)
        case _: raise ValueError(f"Unknown format: {format}. Use 'text' or 'json'")

    logger = logging.getLogger(ROOT_LOGGER)
    for existing in [h for h in logger.handlers if getattr(h, _HANDLER_MARK, False)]:
        logger.removeHandler(existing)

    handler = logging.StreamHandler(output or sys.stderr)
    handler.setFormatter(formatter)
    setattr(handler, _HANDLER_MARK, True)
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level, logging.INFO))
    return logger
