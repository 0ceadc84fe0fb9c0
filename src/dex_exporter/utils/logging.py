"""Logging setup for the dex exporter.

Console output goes through rich by default. --json-logs switches the console to
one JSON object per line; --log-file adds a plain-text copy.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from rich.logging import RichHandler

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s"

# docker-py and urllib3 log every request to the daemon socket below WARNING
_QUIET_LOGGERS = ("urllib3", "docker")


class JsonFormatter(logging.Formatter):
    """Formats a record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _console_handler(rich_console: bool, json_format: bool) -> logging.Handler:
    if json_format:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        return handler
    if rich_console:
        # markup off: container names and daemon errors may contain "[...]"
        return RichHandler(rich_tracebacks=True, markup=False, show_path=False)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    rich_console: bool = True,
    json_format: bool = False,
) -> None:
    """Configure the root logger for the exporter process.

    Args:
        level: Level name, case-insensitive (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Also write plain-text logs to this file
        rich_console: Pretty console output through rich
        json_format: JSON lines on stdout; takes precedence over rich_console

    Raises:
        ValueError: If level is not a known level name
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    handlers = [_console_handler(rich_console, json_format)]
    if log_file is not None:
        handlers.append(_file_handler(log_file))

    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Module logger; configuration is left to setup_logging()."""
    return logging.getLogger(name)
