"""Console logging setup for the command line.

Library modules only create ``logging.getLogger(__name__)`` loggers; the
command line attaches a handler to the ``fkfixer`` logger with
``configure_logging``.

Example output:
    2024-01-15 10:30:00 INFO  [fkfixer.runner] Checking Foreign Key constraint ...
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

ROOT_LOGGER = "fkfixer"


class ConsoleFormatter(logging.Formatter):
    """Human-readable console formatter with optional ANSI colors."""

    COLORS = {
        logging.DEBUG: "\033[36m",     # Cyan
        logging.INFO: "\033[32m",      # Green
        logging.WARNING: "\033[33m",   # Yellow
        logging.ERROR: "\033[31m",     # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(
        self,
        *,
        color: bool = True,
        show_timestamp: bool = True,
        timestamp_format: str = "%Y-%m-%d %H:%M:%S",
    ) -> None:
        super().__init__(datefmt=timestamp_format)
        self._color = color
        self._show_timestamp = show_timestamp

    def format(self, record: logging.LogRecord) -> str:
        parts = []

        if self._show_timestamp:
            parts.append(self.formatTime(record, self.datefmt))

        level = record.levelname.ljust(5)
        if self._color:
            level = f"{self.COLORS.get(record.levelno, '')}{level}{self.RESET}"
        parts.append(level)

        parts.append(f"[{record.name}]")
        parts.append(record.getMessage())

        result = " ".join(parts)
        if record.exc_info:
            result = f"{result}\n{self.formatException(record.exc_info)}"
        return result


def configure_logging(
    level: str | int = "INFO",
    stream: TextIO | None = None,
    color: bool | None = None,
) -> logging.Logger:
    """Send ``fkfixer`` log records to a console stream.

    Args:
        level: Level name or number.
        stream: Destination, standard error by default so that CSV dumps on
            standard output stay clean.
        color: Force colors on or off, default is on for terminals.
    """
    stream = stream or sys.stderr
    if color is None:
        color = stream.isatty()

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ConsoleFormatter(color=color))
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False
    return logger
