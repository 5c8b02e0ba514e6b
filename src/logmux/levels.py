"""
Severity levels and the minimum-level policy.

``trace`` filters like ``debug`` and ``critical`` filters like ``error``.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Iterable

from .bootstrap import get_bootstrap_logger


class Severity(str, Enum):
    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {
    Severity.TRACE: 0,
    Severity.DEBUG: 0,
    Severity.INFO: 1,
    Severity.WARN: 2,
    Severity.ERROR: 3,
    Severity.CRITICAL: 3,
}

_BY_NAME = {severity.value: severity for severity in Severity}

_FILTER_SEPARATORS = re.compile(r"[,\s]+")


def allows(event: Severity, minimum: Severity) -> bool:
    """Return True if an event at ``event`` passes a ``minimum`` filter."""
    return event.rank >= minimum.rank


def resolve_level(name: str, diagnostics: Any = None) -> Severity:
    """Map a level name to a Severity.

    Unknown names are reported once on the bootstrap logger and resolve to
    ``error``, so a typo makes a sink quieter rather than failing the load.
    """
    level_name = name.strip().lower()
    severity = _BY_NAME.get(level_name)
    if severity is None:
        log = diagnostics if diagnostics is not None else get_bootstrap_logger()
        log.error("Unknown log level", level_name=level_name)
        return Severity.ERROR
    return severity


def split_filter_string(value: str | None) -> list[str]:
    if not value:
        return []
    return [part for part in _FILTER_SEPARATORS.split(value) if part]


def parse_filters(entries: Iterable[str], diagnostics: Any = None) -> dict[str, Severity]:
    """Build a logger-name -> minimum level table from ``name:level`` entries.

    Entries without a colon are dropped. Entries with an unknown level are
    kept and resolve through the unknown-level fallback.
    """
    filters: dict[str, Severity] = {}
    for entry in entries:
        parts = entry.split(":")
        if len(parts) > 1:
            filters[parts[0]] = resolve_level(parts[1], diagnostics)
    return filters
