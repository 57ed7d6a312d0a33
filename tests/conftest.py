# tests/conftest.py
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

import pytest

from logsift.domain.models import FileEntry
from logsift.ports.filesystem import FilesystemPort


class MemoryFS(FilesystemPort):
    """In-memory directory tree with per-path failure injection."""

    def __init__(self, volumes: Iterable[str] = ("/vol",)):
        self._volumes = [Path(v) for v in volumes]
        self._children: dict[str, set[str]] = {}
        self._files: dict[str, list[FileEntry]] = {}
        self._failures: dict[str, Exception] = {}
        self.volume_error: Optional[Exception] = None
        self.listed: list[str] = []
        for v in self._volumes:
            self.add_dir(v)

    def add_dir(self, path) -> Path:
        p = Path(path)
        self._children.setdefault(str(p), set())
        self._files.setdefault(str(p), [])
        if p.parent != p:
            self.add_dir(p.parent)
            self._children[str(p.parent)].add(str(p))
        return p

    def add_files(self, directory, *created: datetime, size: int = 0, modified=None) -> None:
        d = self.add_dir(directory)
        for i, ts in enumerate(created):
            self._files[str(d)].append(
                FileEntry(
                    path=d / f"f{len(self._files[str(d)])}_{i}.log",
                    size=size,
                    modified=modified or ts,
                    created=ts,
                )
            )

    def fail(self, path, exc: Exception) -> None:
        self._failures[str(Path(path))] = exc

    def _check(self, path) -> str:
        key = str(Path(path))
        self.listed.append(key)
        if key in self._failures:
            raise self._failures[key]
        if key not in self._children:
            raise FileNotFoundError(key)
        return key

    def list_directories(self, path: Path) -> list[Path]:
        key = self._check(path)
        return [Path(c) for c in sorted(self._children[key])]

    def list_files(self, directory: Path) -> list[FileEntry]:
        key = self._check(directory)
        return list(self._files[key])

    def volumes(self) -> list[Path]:
        if self.volume_error is not None:
            raise self.volume_error
        return list(self._volumes)


@pytest.fixture
def make_memory_fs():
    return MemoryFS


@pytest.fixture
def window():
    start = datetime(2025, 1, 1, 0, 0, 0)
    end = datetime(2025, 1, 31, 23, 59, 59)
    return start, end


@pytest.fixture
def vol_fs(window) -> MemoryFS:
    """
    /vol/A/logs             3 files, 2 inside the window
    /vol/B/C/logs           5 files, all inside
    /vol/excluded-temp/logs 10 files, all inside (excluded by fragment)
    """
    start, end = window
    inside = datetime(2025, 1, 15, 12, 0, 0)
    outside = datetime(2024, 12, 31, 23, 59, 59)

    fs = MemoryFS()
    fs.add_files("/vol/A/logs", inside, inside, outside)
    fs.add_files("/vol/B/C/logs", *([inside] * 5))
    fs.add_files("/vol/excluded-temp/logs", *([inside] * 10))
    fs.add_dir("/vol/D/empty")
    return fs
