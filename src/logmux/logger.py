"""
Named loggers and fan-out dispatch.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

import structlog
from structlog.typing import EventDict

from .levels import Severity, allows
from .sinks import Sink

_add_timestamp = structlog.processors.TimeStamper(fmt="iso", utc=True, key="t")


@dataclass(frozen=True)
class BoundSink:
    """A sink with a logger's minimum level resolved at bind time."""

    sink: Sink
    minimum: Severity

    def emit(self, severity: Severity, event_dict: EventDict) -> None:
        if not allows(severity, self.minimum):
            return
        try:
            self.sink.emit(severity, event_dict)
        except Exception:
            pass  # A broken sink drops the event; callers never see logging failures


class NamedLogger:
    """Emits events under a fixed name and context to a frozen set of sinks.

    The sinks and their levels are captured when the logger is created. A
    later configuration load does not affect an existing NamedLogger; ask the
    logging system for a new one to pick up new sinks or filters.
    """

    __slots__ = ("_name", "_context", "_sinks")

    def __init__(self, name: str, context: Mapping[str, Any], sinks: tuple[BoundSink, ...]):
        self._name = name
        self._context = MappingProxyType(dict(context))
        self._sinks = sinks

    @property
    def name(self) -> str:
        return self._name

    @property
    def context(self) -> Mapping[str, Any]:
        return self._context

    @property
    def sinks(self) -> tuple[BoundSink, ...]:
        return self._sinks

    def bind(self, **context: Any) -> "NamedLogger":
        """Return a logger with extra constant context and the same sinks."""
        return NamedLogger(self._name, {**self._context, **context}, self._sinks)

    def log(self, severity: Severity, msg: str, **kwargs: Any) -> None:
        event_dict: EventDict = _add_timestamp(None, severity.value, {})
        event_dict["logger"] = self._name
        event_dict.update(self._context)
        event_dict["level"] = severity.value
        event_dict["msg"] = msg
        event_dict.update(kwargs)
        for bound in self._sinks:
            bound.emit(severity, dict(event_dict))

    def trace(self, msg: str, **kwargs: Any) -> None:
        self.log(Severity.TRACE, msg, **kwargs)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self.log(Severity.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self.log(Severity.INFO, msg, **kwargs)

    def warn(self, msg: str, **kwargs: Any) -> None:
        self.log(Severity.WARN, msg, **kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self.log(Severity.ERROR, msg, **kwargs)

    def critical(self, msg: str, **kwargs: Any) -> None:
        self.log(Severity.CRITICAL, msg, **kwargs)

    def __repr__(self) -> str:
        return f"NamedLogger(name={self._name!r}, sinks={len(self._sinks)})"
