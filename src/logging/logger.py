# src/logging/logger.py — v3
"""Logger setup for lesscache: JSON or text records carrying render context.

Every module logs through ``logging.getLogger(__name__)``; nothing is printed
until :func:`setup_logging` attaches handlers to the ``lesscache`` logger.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

from lesscache.logging.context import LogContext, get_context

if TYPE_CHECKING:
    from lesscache.config.settings import Settings

ROOT_LOGGER = "lesscache"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _exception_text(formatter: logging.Formatter, record: logging.LogRecord) -> str | None:
    if record.exc_info and record.exc_info[1] is not None:
        return formatter.formatException(record.exc_info)
    return None


class JsonFormatter(logging.Formatter):
    """One JSON object per line, render context nested under ``context``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _utc_now().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            entry["context"] = context
        data = getattr(record, "data", None)
        if data:
            entry["data"] = data
        exc = _exception_text(self, record)
        if exc:
            entry["exception"] = exc
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line records: time, level, logger, render id, short fingerprint."""

    def format(self, record: logging.LogRecord) -> str:
        line = " ".join([
            _utc_now().strftime("%Y-%m-%d %H:%M:%S"),
            f"[{record.levelname:8s}]",
            record.name,
            *_context_tags(get_context()),
            f"- {record.getMessage()}",
        ])
        exc = _exception_text(self, record)
        return f"{line}\n{exc}" if exc else line


def _context_tags(ctx: LogContext) -> list[str]:
    tags: list[str] = []
    if ctx.render_id:
        tags.append(f"[{ctx.render_id}]")
    if ctx.fingerprint:
        tags.append(f"({ctx.fingerprint[:12]})")
    return tags


def get_logger(name: str) -> logging.Logger:
    """Child of the ``lesscache`` logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: str | Path | None = None,
    rotation: str = "10MB",
    retention: int = 30,
    stream: TextIO | None = None,
) -> None:
    """Attach console (and optionally file) handlers to the ``lesscache`` logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.
        log_format: "json" or "text".
        log_file: Optional log file, rotated by size.
        rotation: Size that triggers rotation, e.g. "10MB".
        retention: Rotated files kept.
        stream: Console stream, stdout when None.
    """
    formatter = JsonFormatter() if log_format == "json" else TextFormatter()

    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    if log_file:
        from lesscache.logging.handlers import create_file_handler

        handlers.append(create_file_handler(log_file, rotation=rotation, retention=retention))

    logger = logging.getLogger(ROOT_LOGGER)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)


def setup_logging_from_settings(
    settings: Settings, verbose: bool = False, stream: TextIO | None = None
) -> None:
    """Configure logging from Settings; ``verbose`` forces DEBUG."""
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        stream=stream,
    )
