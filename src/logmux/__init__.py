"""
Multi-sink structured logging.

Routes events to independently configured sinks:
- console: stdout (logfmt, coloured logfmt on a terminal, or JSON lines)
- file: rotating log file
- syslog: local or remote syslog daemon

Each sink has a maximum level plus per-logger-name overrides. The module-level
functions operate on a process-wide default ``LoggingSystem``; construct your
own ``LoggingSystem`` for isolated pipelines.

Library: structlog renderers + orjson for JSON serialization.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from .callers import stack
from .config import LoggingConfig, LoggingSettings
from .core import LoggingSystem, RegistryState, SinkHandle
from .errors import (
    LogDirectoryError,
    LoggingConfigError,
    LogmuxError,
    MissingSectionError,
    SinkInitError,
)
from .interceptors import StdlibBridgeHandler, install_stdlib_bridge
from .levels import Severity, allows, parse_filters, resolve_level
from .logger import NamedLogger
from .sinks import register_sink_factory

_default_system = LoggingSystem()


def get_system() -> LoggingSystem:
    return _default_system


def new(name: str, **context: Any) -> NamedLogger:
    """Get a named logger from the default system."""
    return _default_system.new(name, **context)


def load(modes: Iterable[str], logs_path: str, config: LoggingConfig) -> None:
    _default_system.load(modes, logs_path, config)


def close() -> None:
    _default_system.close()


def reload() -> None:
    _default_system.reload()


def configure_logging(settings: Optional[LoggingSettings] = None) -> LoggingSystem:
    """
    Load the default system from environment-driven settings.

    Args:
        settings: Bootstrap settings (default: read from ``LOGMUX_*`` env vars)
    """
    resolved = settings or LoggingSettings()
    _default_system.load(resolved.mode_list, resolved.logs_path, resolved.to_config())
    return _default_system


__all__ = [
    "LogDirectoryError",
    "LoggingConfig",
    "LoggingConfigError",
    "LoggingSettings",
    "LoggingSystem",
    "LogmuxError",
    "MissingSectionError",
    "NamedLogger",
    "RegistryState",
    "Severity",
    "SinkHandle",
    "SinkInitError",
    "StdlibBridgeHandler",
    "allows",
    "close",
    "configure_logging",
    "get_system",
    "install_stdlib_bridge",
    "load",
    "new",
    "parse_filters",
    "register_sink_factory",
    "reload",
    "resolve_level",
    "stack",
]
