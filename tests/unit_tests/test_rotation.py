"""
Rotating file writer unit tests.
"""

from __future__ import annotations

import os
import time
from datetime import datetime, timedelta

import pytest

from logmux.rotation import RotatingFileWriter


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _rotated(directory, name: str) -> list[str]:
    return sorted(p.name for p in directory.iterdir() if p.name.startswith(name + "."))


class TestWriter:
    """Opening, writing, reloading and closing"""

    def test_init_creates_file_and_counts_existing_lines(self, tmp_path) -> None:
        """Existing content is kept and new lines are appended"""
        path = tmp_path / "app.log"
        path.write_text("one\ntwo\n", encoding="utf-8")
        writer = RotatingFileWriter(path)
        writer.init()
        writer.write("three")
        writer.close()
        assert path.read_text(encoding="utf-8") == "one\ntwo\nthree\n"
        assert writer.closed

    def test_write_after_close_raises(self, tmp_path) -> None:
        """A closed writer rejects writes"""
        writer = RotatingFileWriter(tmp_path / "app.log")
        writer.init()
        writer.close()
        with pytest.raises(ValueError):
            writer.write("late")

    def test_reload_reopens_moved_file(self, tmp_path) -> None:
        """After an external tool moves the file, reload writes to a fresh one"""
        path = tmp_path / "app.log"
        writer = RotatingFileWriter(path, rotate=False)
        writer.init()
        writer.write("before")
        os.replace(path, tmp_path / "moved.log")
        writer.reload()
        writer.write("after")
        writer.close()
        assert path.read_text(encoding="utf-8") == "after\n"
        assert (tmp_path / "moved.log").read_text(encoding="utf-8") == "before\n"

    def test_reload_after_close_stays_closed(self, tmp_path) -> None:
        """Reloading a closed writer does not reopen the file"""
        writer = RotatingFileWriter(tmp_path / "app.log")
        writer.init()
        writer.close()
        writer.reload()
        assert writer.closed
        with pytest.raises(ValueError):
            writer.write("late")


class TestRotation:
    """Line, size and daily rollover"""

    def test_rotates_on_max_lines(self, tmp_path) -> None:
        """Reaching max_lines moves the file to the next numbered name"""
        clock = _Clock(datetime(2024, 5, 1, 12, 0))
        path = tmp_path / "app.log"
        writer = RotatingFileWriter(path, max_lines=2, daily=False, clock=clock)
        writer.init()
        for n in range(5):
            writer.write(f"line {n}")
        writer.close()
        assert _rotated(tmp_path, "app.log") == ["app.log.2024-05-01.001", "app.log.2024-05-01.002"]
        assert path.read_text(encoding="utf-8") == "line 4\n"

    def test_rotates_on_max_size(self, tmp_path) -> None:
        """Reaching max_size rotates before the next write"""
        clock = _Clock(datetime(2024, 5, 1, 12, 0))
        path = tmp_path / "app.log"
        writer = RotatingFileWriter(path, max_lines=0, max_size=8, daily=False, clock=clock)
        writer.init()
        writer.write("0123456789")
        writer.write("next")
        writer.close()
        assert _rotated(tmp_path, "app.log") == ["app.log.2024-05-01.001"]
        assert path.read_text(encoding="utf-8") == "next\n"

    def test_rotation_disabled(self, tmp_path) -> None:
        """With rotation off the file only grows"""
        path = tmp_path / "app.log"
        writer = RotatingFileWriter(path, rotate=False, max_lines=1)
        writer.init()
        writer.write("a")
        writer.write("b")
        writer.close()
        assert _rotated(tmp_path, "app.log") == []
        assert path.read_text(encoding="utf-8") == "a\nb\n"

    def test_daily_rotation_uses_open_date_and_prunes_old_files(self, tmp_path) -> None:
        """A day change rotates under the old date and prunes expired files"""
        clock = _Clock(datetime(2024, 5, 1, 23, 59))
        path = tmp_path / "app.log"
        stale = tmp_path / "app.log.2024-04-01.001"
        stale.write_text("old\n", encoding="utf-8")
        old = time.time() - 30 * 86400
        os.utime(stale, (old, old))
        unrelated = tmp_path / "other.log"
        unrelated.write_text("keep\n", encoding="utf-8")
        os.utime(unrelated, (old, old))

        writer = RotatingFileWriter(path, daily=True, max_days=7, clock=clock)
        writer.init()
        writer.write("day one")
        clock.now = clock.now + timedelta(minutes=2)
        writer.write("day two")
        writer.close()

        assert _rotated(tmp_path, "app.log") == ["app.log.2024-05-01.001"]
        assert (tmp_path / "app.log.2024-05-01.001").read_text(encoding="utf-8") == "day one\n"
        assert path.read_text(encoding="utf-8") == "day two\n"
        assert not stale.exists()
        assert unrelated.exists()

    def test_rotation_survives_file_moved_away(self, tmp_path) -> None:
        """If the file vanished before rotation, writing continues in a fresh file"""
        clock = _Clock(datetime(2024, 5, 1, 12, 0))
        path = tmp_path / "app.log"
        writer = RotatingFileWriter(path, max_lines=2, daily=False, clock=clock)
        writer.init()
        writer.write("one")
        os.replace(path, tmp_path / "moved.log")
        writer.write("two")
        writer.write("three")
        writer.write("four")
        assert not writer.closed
        writer.close()
        assert (tmp_path / "moved.log").read_text(encoding="utf-8") == "one\ntwo\n"
        assert path.read_text(encoding="utf-8") == "three\nfour\n"
        assert _rotated(tmp_path, "app.log") == []
