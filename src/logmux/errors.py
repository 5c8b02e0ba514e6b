"""
Exception hierarchy for the logging pipeline.

Configuration and backend-construction failures are raised to the caller of
``LoggingSystem.load``. Dispatch never raises; see ``logmux.logger``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class LogmuxError(Exception):
    """Root of all logmux errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


# ================================
# Configuration errors
# ================================


class LoggingConfigError(LogmuxError):
    """The logging configuration cannot be applied."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "LOGGING_CONFIG_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class MissingSectionError(LoggingConfigError):
    """An enabled mode has no ``log.<mode>`` section."""

    def __init__(self, *, mode: str) -> None:
        super().__init__(
            f"failed to get config section log.{mode}",
            code="MISSING_SECTION",
            details={"mode": mode, "section": f"log.{mode}"},
        )
        self.mode = mode


class LogDirectoryError(LoggingConfigError):
    """The parent directory of a log file could not be created."""

    def __init__(self, *, directory: str, reason: str) -> None:
        super().__init__(
            f"failed to create log directory {directory!r}: {reason}",
            code="LOG_DIRECTORY",
            details={"directory": directory, "reason": reason},
        )
        self.directory = directory


# ================================
# Backend errors
# ================================


class SinkInitError(LogmuxError):
    """A sink backend failed to initialize."""

    def __init__(self, *, mode: str, reason: str) -> None:
        super().__init__(
            f"failed to initialize {mode} handler: {reason}",
            code="SINK_INIT",
            details={"mode": mode, "reason": reason},
        )
        self.mode = mode
