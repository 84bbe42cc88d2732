"""Centralized logging helpers shared by the resolver and the CLI.

Keeps log setup in one place so modules only need a module-level
``logger = logging.getLogger(__name__)`` plus these helpers for structured
DEBUG traces.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

from constants import Constants

_CONFIGURED = False


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once.

    The level comes from ``level`` when given, else from the
    ``SYSDEPS_LOG_LEVEL`` environment variable, else INFO.
    """
    global _CONFIGURED  # pylint: disable=global-statement
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger()
    if not _CONFIGURED:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(handler)
        _CONFIGURED = True
    root.setLevel(level_value)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` payload for structured log records.

    ``None`` values are dropped so records only carry populated fields.
    """
    return {key: value for key, value in fields.items() if value is not None}


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by ``logger``."""
    return logger.isEnabledFor(logging.DEBUG)


class Timer:
    """Context manager measuring wall time in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> float:
        """Elapsed milliseconds; still running timers report time so far."""
        end = self._end if self._end is not None else time.perf_counter()
        return round((end - self._start) * 1000.0, 3)
