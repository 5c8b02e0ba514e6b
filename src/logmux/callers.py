"""
Caller stack capture for attaching to diagnostic events.
"""

from __future__ import annotations

import inspect
import os


def stack(skip: int = 1) -> str:
    """Return the call stack, innermost first, as ``[file.py:12 other.py:40]``.

    ``skip`` counts frames from ``stack`` itself: 0 starts the trace inside
    ``stack``, 1 at the line that called it, 2 at that function's caller.
    Frames from the standard library runpy/importlib machinery are trimmed.
    """
    frame = inspect.currentframe()
    for _ in range(skip):
        if frame is None:
            break
        frame = frame.f_back

    parts: list[str] = []
    try:
        while frame is not None:
            module = frame.f_globals.get("__name__", "")
            if not _is_runtime(module):
                filename = os.path.basename(frame.f_code.co_filename)
                parts.append(f"{filename}:{frame.f_lineno}")
            frame = frame.f_back
    finally:
        del frame
    return "[" + " ".join(parts) + "]"


def _is_runtime(module: str) -> bool:
    return module in ("runpy", "<frozen runpy>") or module.startswith(("importlib", "_frozen_importlib"))
