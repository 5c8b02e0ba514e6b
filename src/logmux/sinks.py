"""
Sink capabilities and the built-in console, file and syslog sinks.

A sink only has to emit. Closing and reloading are separate capabilities that
the loader detects per sink, so a sink opts into lifecycle handling by
implementing ``close()`` and/or ``reload()``.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import socket
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Optional, Protocol, runtime_checkable

from pydantic import BaseModel
from structlog.typing import EventDict

from .bootstrap import get_bootstrap_logger
from .config import DEFAULT_LOG_FILE_NAME, ConsoleSection, FileSection, SyslogSection
from .errors import LogDirectoryError, SinkInitError
from .formatters import Formatter, get_formatter
from .levels import Severity
from .rotation import RotatingFileWriter

# =============================================================================
# Capabilities
# =============================================================================


@runtime_checkable
class Sink(Protocol):
    def emit(self, severity: Severity, event_dict: EventDict) -> None: ...


@runtime_checkable
class Closable(Protocol):
    def close(self) -> None: ...


@runtime_checkable
class Reloadable(Protocol):
    def reload(self) -> None: ...


@dataclass(frozen=True)
class SinkContext:
    """What a sink factory may use besides its own section."""

    mode: str
    logs_path: str
    stdout: Any = None
    diagnostics: Any = field(default=None, compare=False)

    @property
    def log(self) -> Any:
        return self.diagnostics if self.diagnostics is not None else get_bootstrap_logger()


class SinkFactory(Protocol):
    section_model: ClassVar[type[BaseModel]]

    def from_section(self, section: Any, context: SinkContext) -> Optional[Sink]: ...


# =============================================================================
# Console
# =============================================================================


class ConsoleSink:
    """Writes one line per event to the process stdout (or an injected stream)."""

    section_model: ClassVar[type[BaseModel]] = ConsoleSection

    def __init__(self, formatter: Formatter, stream: Any = None):
        self._formatter = formatter
        self._stream = stream if stream is not None else sys.stdout
        self._lock = threading.Lock()

    @classmethod
    def from_section(cls, section: ConsoleSection, context: SinkContext) -> "ConsoleSink":
        stream = context.stdout if context.stdout is not None else sys.stdout
        return cls(get_formatter(section.format, stream), stream)

    def emit(self, severity: Severity, event_dict: EventDict) -> None:
        output = self._formatter(event_dict)
        with self._lock:
            self._stream.write(output + "\n")
            self._stream.flush()


# =============================================================================
# File
# =============================================================================


class FileSink:
    """Formats events and hands the lines to a rotating file writer."""

    section_model: ClassVar[type[BaseModel]] = FileSection

    def __init__(self, formatter: Formatter, writer: RotatingFileWriter):
        self._formatter = formatter
        self.writer = writer

    @classmethod
    def from_section(cls, section: FileSection, context: SinkContext) -> "FileSink":
        file_name = Path(section.file_name or os.path.join(context.logs_path, DEFAULT_LOG_FILE_NAME))
        directory = str(file_name.parent)
        try:
            file_name.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            context.log.error("Failed to create directory", dpath=directory, err=str(exc))
            raise LogDirectoryError(directory=directory, reason=str(exc)) from exc

        writer = RotatingFileWriter(
            file_name,
            rotate=section.log_rotate,
            max_lines=section.max_lines,
            max_size=1 << section.max_size_shift,
            daily=section.daily_rotate,
            max_days=section.max_days,
        )
        try:
            writer.init()
        except OSError as exc:
            context.log.error("Failed to initialize file handler", dpath=directory, err=str(exc))
            raise SinkInitError(mode=context.mode, reason=str(exc)) from exc
        # The file is never a terminal, so "console" renders as plain text here.
        return cls(get_formatter(section.format), writer)

    def emit(self, severity: Severity, event_dict: EventDict) -> None:
        self.writer.write(self._formatter(event_dict))

    def reload(self) -> None:
        self.writer.reload()

    def close(self) -> None:
        self.writer.close()


# =============================================================================
# Syslog
# =============================================================================

_SYSLOG_PRIORITIES = {
    Severity.TRACE: "debug",
    Severity.DEBUG: "debug",
    Severity.INFO: "info",
    Severity.WARN: "warning",
    Severity.ERROR: "error",
    Severity.CRITICAL: "critical",
}

_SOCKET_TYPES = {
    "udp": socket.SOCK_DGRAM,
    "tcp": socket.SOCK_STREAM,
}


class _SyslogHandler(logging.handlers.SysLogHandler):
    def mapPriority(self, levelName: str) -> str:
        return levelName

    def handleError(self, record: logging.LogRecord) -> None:
        # Propagate to the dispatcher, which drops failed writes.
        raise


def _parse_address(address: str) -> tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep or not host:
        raise ValueError(f"invalid syslog address {address!r}, expected host:port")
    return host, int(port)


class SyslogSink:
    """Sends events to a local or remote syslog daemon."""

    section_model: ClassVar[type[BaseModel]] = SyslogSection

    def __init__(self, formatter: Formatter, handler: logging.handlers.SysLogHandler):
        self._formatter = formatter
        self._handler = handler

    @classmethod
    def from_section(cls, section: SyslogSection, context: SinkContext) -> "SyslogSink":
        try:
            handler = cls._build_handler(section)
        except (OSError, ValueError, KeyError) as exc:
            context.log.error("Failed to initialize syslog handler", err=str(exc))
            raise SinkInitError(mode=context.mode, reason=str(exc)) from exc
        return cls(get_formatter(section.format), handler)

    @staticmethod
    def _build_handler(section: SyslogSection) -> logging.handlers.SysLogHandler:
        network = section.network.strip().lower()
        facility = logging.handlers.SysLogHandler.facility_names[section.facility.strip().lower()]
        if network in ("", "unix", "unixgram"):
            handler = _SyslogHandler(address=section.address or "/dev/log", facility=facility)
        else:
            handler = _SyslogHandler(
                address=_parse_address(section.address),
                facility=facility,
                socktype=_SOCKET_TYPES[network],
            )
        if section.tag:
            handler.ident = f"{section.tag}: "
        return handler

    def emit(self, severity: Severity, event_dict: EventDict) -> None:
        record = logging.makeLogRecord(
            {
                "msg": self._formatter(event_dict),
                "levelname": _SYSLOG_PRIORITIES[severity],
                "levelno": logging.INFO,
            }
        )
        # handle() takes the handler lock around emit().
        self._handler.handle(record)

    def close(self) -> None:
        self._handler.close()


# =============================================================================
# Mode registry
# =============================================================================

SINK_FACTORIES: dict[str, SinkFactory] = {
    "console": ConsoleSink,
    "file": FileSink,
    "syslog": SyslogSink,
}


def register_sink_factory(mode: str, factory: SinkFactory) -> None:
    """Make ``mode`` available to configuration loads.

    ``factory`` needs a ``section_model`` and a ``from_section`` classmethod.
    """
    if not hasattr(factory, "section_model") or not callable(getattr(factory, "from_section", None)):
        raise TypeError(f"sink factory for mode {mode!r} must define section_model and from_section")
    SINK_FACTORIES[mode] = factory


__all__ = [
    "Closable",
    "ConsoleSink",
    "FileSink",
    "Reloadable",
    "SINK_FACTORIES",
    "Sink",
    "SinkContext",
    "SinkFactory",
    "SyslogSink",
    "register_sink_factory",
]
