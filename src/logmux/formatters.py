"""
Output formats and terminal colour selection.
"""

from __future__ import annotations

from typing import Any, Callable

import orjson
import structlog
from structlog.typing import EventDict

Formatter = Callable[[EventDict], str]


def orjson_dumps(v: Any, *, default: Any = None) -> str:
    """Fast JSON serialization using orjson."""
    return orjson.dumps(v, default=default, option=orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC).decode()


# =============================================================================
# Renderers
# =============================================================================

_LOGFMT = structlog.processors.LogfmtRenderer(bool_as_flag=False)
_JSON = structlog.processors.JSONRenderer(serializer=orjson_dumps)


def render_logfmt(event_dict: EventDict) -> str:
    return _LOGFMT(None, str(event_dict.get("level", "")), dict(event_dict))


def render_json(event_dict: EventDict) -> str:
    return _JSON(None, str(event_dict.get("level", "")), dict(event_dict))


# =============================================================================
# Console Formatter (colour by level)
# =============================================================================


class ConsoleFormatter:
    """Logfmt lines coloured as a whole according to the event level."""

    _RESET = "\x1b[0m"
    _LEVEL_COLORS = {
        "trace": "\x1b[90m",
        "debug": "\x1b[90m",
        "info": "\x1b[37m",
        "warn": "\x1b[33m",
        "error": "\x1b[31m",
        "critical": "\x1b[37;41m",
    }

    @classmethod
    def color_for(cls, level: str) -> str:
        return cls._LEVEL_COLORS.get(level, "")

    @classmethod
    def format(cls, event_dict: EventDict) -> str:
        line = render_logfmt(event_dict)
        color = cls.color_for(str(event_dict.get("level", "")))
        if not color:
            return line
        return f"{color}{line}{cls._RESET}"


def _is_terminal(stream: Any) -> bool:
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except (ValueError, OSError):
        return False


def get_formatter(name: str, stream: Any = None) -> Formatter:
    """Select the formatter for a format name.

    ``console`` is colourised only when ``stream`` is an interactive terminal.
    Unknown or empty names fall back to plain logfmt text.
    """
    fmt = (name or "").strip().lower()
    if fmt == "console":
        if _is_terminal(stream):
            return ConsoleFormatter.format
        return render_logfmt
    if fmt == "json":
        return render_json
    return render_logfmt
