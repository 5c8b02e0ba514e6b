"""
Bootstrap logger for the pipeline's own diagnostics.

Sinks may not exist yet (or may be the thing that is broken), so internal
messages such as unknown levels or modes go to stderr in logfmt.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


class _StderrFile:
    """Resolves ``sys.stderr`` on every write so redirection is honoured."""

    def write(self, s: str) -> None:
        sys.stderr.write(s)

    def flush(self) -> None:
        sys.stderr.flush()


def build_bootstrap_logger() -> Any:
    return structlog.wrap_logger(
        structlog.PrintLogger(file=_StderrFile()),
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="t"),
            structlog.processors.EventRenamer("msg"),
            structlog.processors.LogfmtRenderer(key_order=["t", "level", "msg"], bool_as_flag=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
    )


_BOOTSTRAP_LOGGER = build_bootstrap_logger()


def get_bootstrap_logger() -> Any:
    return _BOOTSTRAP_LOGGER
