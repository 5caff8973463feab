"""
Host-aware logging for shadecast.

Messages go to the standard logging module unless a host application (a map
UI, a processing framework) has registered a feedback object with
:func:`set_feedback`. A feedback object is anything exposing
``push_info(msg)``, ``push_debug_info(msg)`` and ``report_error(msg)``; the
same object can be handed to ``build_shadow_raster(feedback=...)`` for
progress.

Usage:
    from shadecast.shadecast_logging import get_logger

    logger = get_logger(__name__)
    logger.info("Fetched 212 buildings within 350 m")
    logger.warning("Skipping building 42: ring is not closed")
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


# Shared by every ShadecastLogger
_feedback: Any = None
_level = LogLevel.INFO

_loggers: dict[str, ShadecastLogger] = {}


class ShadecastLogger:
    """Named logger that defers to the host feedback object when one is registered."""

    def __init__(self, name: str):
        self.name = name
        self._python_logger = logging.getLogger(name)

    def _log(self, level: LogLevel, message: str) -> None:
        if level < _level:
            return

        feedback = _feedback
        if feedback is None:
            self._python_logger.log(level, message)
        elif level >= LogLevel.ERROR:
            feedback.report_error(message)
        elif level >= LogLevel.WARNING:
            feedback.push_info(f"WARNING: {message}")
        elif level >= LogLevel.INFO:
            feedback.push_info(message)
        else:
            feedback.push_debug_info(message)

    def debug(self, message: str) -> None:
        self._log(LogLevel.DEBUG, message)

    def info(self, message: str) -> None:
        self._log(LogLevel.INFO, message)

    def warning(self, message: str) -> None:
        self._log(LogLevel.WARNING, message)

    def error(self, message: str) -> None:
        self._log(LogLevel.ERROR, message)


def get_logger(name: str) -> ShadecastLogger:
    """
    Logger for ``name`` (usually ``__name__``), created once and cached.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Raster build started")
    """
    if name not in _loggers:
        _loggers[name] = ShadecastLogger(name)
    return _loggers[name]


def set_level(level: LogLevel | int) -> None:
    """
    Minimum level for every shadecast logger (default INFO).

    Example:
        >>> import shadecast.shadecast_logging as slog
        >>> slog.set_level(slog.LogLevel.DEBUG)
    """
    global _level
    _level = LogLevel(level)


def set_feedback(feedback: Any) -> None:
    """Route every shadecast logger to ``feedback``; None restores Python logging."""
    global _feedback
    _feedback = feedback
