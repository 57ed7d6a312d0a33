# tests/unit/test_local_fs.py
import os
import types
from datetime import datetime, timedelta
from pathlib import Path

import pytest

import logsift.adapters.filesystem.local_fs as mod
from logsift.adapters.filesystem.local_fs import LocalFS


def test_list_directories_returns_only_directories(tmp_path: Path):
    (tmp_path / "a").mkdir()
    (tmp_path / "b").mkdir()
    (tmp_path / "file.txt").write_text("x")

    dirs = sorted(LocalFS().list_directories(tmp_path))
    assert dirs == [tmp_path / "a", tmp_path / "b"]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_symlinked_directories_are_not_followed(tmp_path: Path):
    real = tmp_path / "real"
    real.mkdir()
    try:
        (tmp_path / "link").symlink_to(real, target_is_directory=True)
    except OSError:
        pytest.skip("cannot create symlinks here")
    assert LocalFS().list_directories(tmp_path) == [real]


def test_list_files_reports_metadata(tmp_path: Path):
    f = tmp_path / "a.log"
    f.write_bytes(b"x" * 2048)
    (tmp_path / "sub").mkdir()

    ts = datetime(2025, 1, 10, 8, 30).timestamp()
    os.utime(f, (ts, ts))

    entries = LocalFS().list_files(tmp_path)
    assert len(entries) == 1
    e = entries[0]
    assert e.path == f
    assert e.size == 2048
    assert e.modified == datetime.fromtimestamp(ts)
    assert abs(e.created - datetime.now()) < timedelta(days=1)


def test_listing_missing_directory_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        LocalFS().list_directories(tmp_path / "nope")
    with pytest.raises(FileNotFoundError):
        LocalFS().list_files(tmp_path / "nope")


def test_explicit_volume_roots_are_filtered_and_deduplicated(tmp_path: Path):
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.mkdir()
    b.mkdir()
    fs = LocalFS(volume_roots=[a, tmp_path / "missing", b, a])
    assert fs.volumes() == [a, b]


def test_volumes_come_from_psutil_partitions(tmp_path: Path, monkeypatch):
    ready = tmp_path / "ready"
    ready.mkdir()
    parts = [
        types.SimpleNamespace(mountpoint=str(ready)),
        types.SimpleNamespace(mountpoint=str(tmp_path / "cdrom")),  # not ready
        types.SimpleNamespace(mountpoint=""),
    ]
    fake = types.SimpleNamespace(disk_partitions=lambda all=False: parts)
    monkeypatch.setattr(mod, "psutil", fake)

    assert LocalFS().volumes() == [ready]


def test_hidden_directories_are_skipped_on_request(tmp_path: Path):
    (tmp_path / ".cache").mkdir()
    (tmp_path / "logs").mkdir()

    assert sorted(LocalFS().list_directories(tmp_path)) == [tmp_path / ".cache", tmp_path / "logs"]
    assert LocalFS(skip_hidden=True).list_directories(tmp_path) == [tmp_path / "logs"]


class _Entry:
    def __init__(self, path: Path, error: Exception | None = None):
        self.path = str(path)
        self.name = path.name
        self._error = error

    def is_file(self):
        return True

    def stat(self, follow_symlinks=True):
        if self._error is not None:
            raise self._error
        return os.stat(self.path)


class _Listing:
    def __init__(self, entries):
        self._entries = entries

    def __enter__(self):
        return iter(self._entries)

    def __exit__(self, *exc):
        return False


def test_unreadable_file_is_skipped_not_the_whole_listing(tmp_path: Path, monkeypatch):
    good = tmp_path / "good.log"
    good.write_text("x")
    listing = _Listing([_Entry(tmp_path / "locked.log", PermissionError("denied")), _Entry(good)])
    monkeypatch.setattr(mod.os, "scandir", lambda path: listing)

    entries = LocalFS().list_files(tmp_path)
    assert [e.path for e in entries] == [good]
