"""
Rotating file writer used by the file sink.

Rotation happens before a write when the current file has reached the line
limit, the byte limit, or was opened on a previous day. Rotated files are
renamed to ``<file>.<YYYY-MM-DD>.<NNN>``.
"""

from __future__ import annotations

import os
import threading
import time
from datetime import date, datetime
from pathlib import Path
from typing import IO, Callable

MAX_ROTATE_SUFFIX = 999


class RotatingFileWriter:
    def __init__(
        self,
        filename: str | Path,
        *,
        rotate: bool = True,
        max_lines: int = 1_000_000,
        max_size: int = 1 << 28,
        daily: bool = True,
        max_days: int = 7,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.filename = Path(filename)
        self.rotate = rotate
        self.max_lines = max_lines
        self.max_size = max_size
        self.daily = daily
        self.max_days = max_days
        self._clock = clock
        self._lock = threading.Lock()
        self._file: IO[str] | None = None
        self._lines = 0
        self._size = 0
        self._open_date: date | None = None

    def init(self) -> None:
        """Open (or create) the target file and load its counters."""
        with self._lock:
            self._open()

    def write(self, line: str) -> None:
        data = line if line.endswith("\n") else line + "\n"
        with self._lock:
            if self._file is None:
                raise ValueError(f"log file {self.filename} is closed")
            if self._needs_rotation():
                self._do_rotate()
            self._file.write(data)
            self._file.flush()
            self._lines += 1
            self._size += len(data.encode("utf-8"))

    def reload(self) -> None:
        """Reopen the file, e.g. after an external tool moved it away.

        A closed writer stays closed.
        """
        with self._lock:
            if self._file is None:
                return
            self._close()
            self._open()

    def close(self) -> None:
        with self._lock:
            self._close()

    @property
    def closed(self) -> bool:
        return self._file is None

    # -------------------------------------------------------------------------

    def _open(self) -> None:
        self._file = open(self.filename, "a", encoding="utf-8")
        self._size = self.filename.stat().st_size
        self._lines = self._count_lines() if self.max_lines > 0 else 0
        self._open_date = self._clock().date()

    def _close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def _count_lines(self) -> int:
        count = 0
        with open(self.filename, "rb") as fh:
            for chunk in iter(lambda: fh.read(32 * 1024), b""):
                count += chunk.count(b"\n")
        return count

    def _needs_rotation(self) -> bool:
        if not self.rotate:
            return False
        if self.max_lines > 0 and self._lines >= self.max_lines:
            return True
        if self.max_size > 0 and self._size >= self.max_size:
            return True
        return self.daily and self._clock().date() != self._open_date

    def _rotated_name(self) -> Path:
        stamp = (self._open_date or self._clock().date()).strftime("%Y-%m-%d")
        for num in range(1, MAX_ROTATE_SUFFIX + 1):
            candidate = self.filename.with_name(f"{self.filename.name}.{stamp}.{num:03d}")
            if not candidate.exists():
                return candidate
        raise OSError(f"cannot find free log number to rename {self.filename}")

    def _do_rotate(self) -> None:
        target = self._rotated_name()
        day_changed = self._clock().date() != self._open_date
        self._close()
        try:
            os.replace(self.filename, target)
        except FileNotFoundError:
            # moved away externally; start a fresh file
            pass
        finally:
            self._open()
        if self.daily and day_changed:
            self._delete_old_logs()

    def _delete_old_logs(self) -> None:
        if self.max_days <= 0:
            return
        cutoff = time.time() - self.max_days * 86400
        prefix = self.filename.name
        for entry in self.filename.parent.iterdir():
            if not entry.is_file() or not entry.name.startswith(prefix) or entry == self.filename:
                continue
            try:
                if entry.stat().st_mtime < cutoff:
                    entry.unlink()
            except FileNotFoundError:
                continue
