"""Centralized logging helpers.

Console output stays terse (``[LEVEL] message``); the per-user log file gets
timestamps and logger names. DEBUG traces attach structured fields through
``extra_context`` so a file handler with a richer formatter can pick them up.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from constants import Constants

_CONSOLE_HANDLER_NAME = "hvm-console"
_FILE_HANDLER_NAME = "hvm-file"


def configure_logging(level: Optional[str] = None) -> None:
    """Install the console handler once and set the root level.

    Args:
        level: Level name; defaults to ``Constants.LOG_LEVEL``, which already
            reflects ``HVM_LOG_LEVEL`` and ``--loglevel`` once configuration is loaded.
    """
    root = logging.getLogger()
    if not any(h.get_name() == _CONSOLE_HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_CONSOLE_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(handler)
    level_name = (level or Constants.LOG_LEVEL).upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))


def add_file_handler(path: str) -> logging.Handler:
    """Attach an append-mode file handler, replacing any earlier one."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _FILE_HANDLER_NAME:
            root.removeHandler(existing)
            existing.close()
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.set_name(_FILE_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(Constants.LOG_FILE_FORMAT))
    root.addHandler(handler)
    return handler


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records, dropping None values."""
    return {k: v for k, v in fields.items() if v is not None}


def safe_url(url: Optional[str]) -> Optional[str]:
    """Strip credentials and query string from a URL before logging it."""
    if not url:
        return url
    try:
        parts = urlsplit(url)
    except ValueError:
        return "<unparseable-url>"
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    return urlunsplit((parts.scheme, netloc, parts.path, "", ""))


class Timer:
    """Context manager measuring wall-clock duration in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds so far, or the final duration after exit."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
