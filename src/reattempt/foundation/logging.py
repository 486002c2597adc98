"""Logging setup for the reattempt package.

Modules log through standard ``logging`` loggers under the ``reattempt``
namespace. configure_logging() attaches a single handler to that namespace:
human-readable text, or JSON lines (rendered with orjson) for log aggregation.

Example:
    >>> from reattempt.foundation.logging import configure_logging
    >>> configure_logging(format="json", level="DEBUG")
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING, TextIO

import orjson

if TYPE_CHECKING:
    from reattempt.foundation.config import LoggingSettings

LOGGER_NAME = "reattempt"

# Attributes every LogRecord carries; anything else came in through `extra=`
_RECORD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, event and extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update((k, v) for k, v in record.__dict__.items() if k not in _RECORD_ATTRS)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(payload, default=str, option=orjson.OPT_NON_STR_KEYS).decode()


_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    format: str = "text",  # noqa: A002 - shadows builtin but matches LoggingSettings
    level: str = "INFO",
    *,
    output: TextIO | None = None,
) -> logging.Logger:
    """Configure the ``reattempt`` logger. Format: "text", "json" or "none".

    Calling it again replaces the previously installed handler. An unknown
    format raises ValueError and leaves the current configuration in place.
    """
    match format:
        case "text":
            handler: logging.Handler = logging.StreamHandler(output or sys.stderr)
            handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
        case "json":
            handler = logging.StreamHandler(output or sys.stdout)
            handler.setFormatter(JsonFormatter())
        case "none":
            handler = logging.NullHandler()
        case _:
            raise ValueError(f"Unknown format: {format}. Use 'text', 'json', or 'none'")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for old in [h for h in logger.handlers if getattr(h, "_reattempt", False)]:
        logger.removeHandler(old)

    handler._reattempt = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger


def configure_from_settings(settings: LoggingSettings | None = None) -> logging.Logger:
    """Apply LoggingSettings (defaults to the global settings)."""
    if settings is None:
        from reattempt.foundation.config import get_settings
        settings = get_settings().logging
    return configure_logging(settings.format, settings.level)
