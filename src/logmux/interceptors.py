"""
Bridge from the standard library ``logging`` module into a LoggingSystem.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .levels import Severity

if TYPE_CHECKING:
    from .core import LoggingSystem

_FORMATTER = logging.Formatter()


def severity_for(levelno: int) -> Severity:
    if levelno >= logging.CRITICAL:
        return Severity.CRITICAL
    if levelno >= logging.ERROR:
        return Severity.ERROR
    if levelno >= logging.WARNING:
        return Severity.WARN
    if levelno >= logging.INFO:
        return Severity.INFO
    if levelno >= logging.DEBUG:
        return Severity.DEBUG
    return Severity.TRACE


class StdlibBridgeHandler(logging.Handler):
    """
    Forward standard library log records to the pipeline.

    Each record goes to ``system.new(record.name)``, so third-party loggers
    are filtered by name like any other named logger.
    """

    def __init__(self, system: "LoggingSystem", level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._system = system

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = record.getMessage()
            logger = self._system.new(record.name or "stdlib")
            if record.exc_info:
                logger.log(severity_for(record.levelno), msg, exc=_FORMATTER.formatException(record.exc_info))
            else:
                logger.log(severity_for(record.levelno), msg)
        except Exception:
            self.handleError(record)


def install_stdlib_bridge(system: "LoggingSystem", level: int = logging.INFO) -> StdlibBridgeHandler:
    """Attach a bridge into ``system`` to the root logger, replacing an earlier bridge."""
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if isinstance(handler, StdlibBridgeHandler):
            root_logger.removeHandler(handler)
    bridge = StdlibBridgeHandler(system)
    root_logger.addHandler(bridge)
    root_logger.setLevel(level)
    return bridge
