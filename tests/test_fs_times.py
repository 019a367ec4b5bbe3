"""Tests for filesystem clock access."""

import os
from datetime import datetime
from pathlib import Path

import fs_times
from fs_times import file_clocks, file_mtime, set_file_times

T = int(datetime(2021, 6, 1, 12, 0, 0).timestamp())


def touch(path: Path, t: int) -> Path:
    path.write_bytes(b"x")
    os.utime(path, (t, t))
    return path


class TestFileClocks:
    """Test file_clocks."""

    def test_posix_only_mtime(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setattr(fs_times.platform, "system", lambda: "Linux")
        p = touch(tmp_path / "a.jpg", T)

        assert file_clocks(p) == [T]

    def test_windows_creation_and_write(self, tmp_path: Path, monkeypatch) -> None:
        """On Windows both creation time and write time count."""
        monkeypatch.setattr(fs_times.platform, "system", lambda: "Windows")
        p = touch(tmp_path / "a.jpg", T)

        clocks = file_clocks(p)

        assert len(clocks) == 2
        assert clocks[1] == T

    def test_missing_file(self, tmp_path: Path) -> None:
        assert file_clocks(tmp_path / "gone.jpg") == []


class TestSetFileTimes:
    """Test set_file_times."""

    def test_sets_mtime(self, tmp_path: Path) -> None:
        p = touch(tmp_path / "a.jpg", T)

        assert set_file_times(p, T + 3600) is True
        assert file_mtime(p) == T + 3600
        assert int(os.stat(p).st_atime) == T + 3600

    def test_missing_file(self, tmp_path: Path) -> None:
        assert set_file_times(tmp_path / "gone.jpg", T) is False

    def test_windows_sets_creation_time(self, tmp_path: Path, monkeypatch) -> None:
        """On Windows the creation clock moves to the target too."""
        calls = []
        monkeypatch.setattr(fs_times.platform, "system", lambda: "Windows")
        monkeypatch.setattr(fs_times, "setctime", lambda p, t: calls.append((p, t)))
        p = touch(tmp_path / "a.jpg", T)

        assert set_file_times(p, T + 60) is True
        assert calls == [(str(p), T + 60)]
        assert file_mtime(p) == T + 60

    def test_posix_leaves_creation_time(self, tmp_path: Path, monkeypatch) -> None:
        calls = []
        monkeypatch.setattr(fs_times.platform, "system", lambda: "Linux")
        monkeypatch.setattr(fs_times, "setctime", lambda p, t: calls.append((p, t)))

        assert set_file_times(touch(tmp_path / "a.jpg", T), T + 60) is True
        assert calls == []

    def test_creation_time_failure_reported(self, tmp_path: Path, monkeypatch) -> None:
        def refuse(p, t):
            raise OSError("access denied")

        monkeypatch.setattr(fs_times.platform, "system", lambda: "Windows")
        monkeypatch.setattr(fs_times, "setctime", refuse)

        assert set_file_times(touch(tmp_path / "a.jpg", T), T + 60) is False
