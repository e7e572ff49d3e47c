"""Logging helpers: colored `level: message` lines or compact JSON, on stderr"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

import typer

_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

_LEVEL_COLORS = {
    logging.DEBUG: typer.colors.BRIGHT_BLACK,
    logging.INFO: typer.colors.YELLOW,
    logging.WARNING: typer.colors.MAGENTA,
    logging.ERROR: typer.colors.RED,
    logging.CRITICAL: typer.colors.RED,
}


class LevelFormatter(logging.Formatter):
    """Render records as `error: message`, coloring the level name."""

    def __init__(self, color: bool = True) -> None:
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname.lower()
        if self.color:
            level = typer.style(level, fg=_LEVEL_COLORS.get(record.levelno))
        message = f"{level}: {record.getMessage()}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


class JsonFormatter(logging.Formatter):
    """Render log records as compact JSON."""

    default_time_format = "%Y-%m-%dT%H:%M:%S"

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.default_time_format),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS
        }
        if extras:
            data.update(extras)

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        return json.dumps(data, ensure_ascii=False, default=str)


def configure_logging(
    *,
    level: int = logging.INFO,
    structured: bool = False,
    color: bool | None = None,
) -> None:
    """Configure the devsync logger tree; calling it again replaces the handler."""

    logger = logging.getLogger("devsync")
    logger.setLevel(level)

    if color is None:
        color = sys.stderr.isatty()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if structured else LevelFormatter(color=color))

    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)


__all__ = ["configure_logging", "JsonFormatter", "LevelFormatter"]
