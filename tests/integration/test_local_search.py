import asyncio
import os
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from logsift.adapters.filesystem.local_fs import LocalFS
from logsift.services import FolderSearchService, VolumeScanner


def write_files(d: Path, n: int) -> None:
    d.mkdir(parents=True, exist_ok=True)
    for i in range(n):
        (d / f"{i}.log").write_text(f"line {i}\n")


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    vol = tmp_path / "vol"
    write_files(vol / "A" / "logs", 2)
    write_files(vol / "B" / "C" / "logs", 5)
    write_files(vol / "excluded-temp" / "logs", 10)
    (vol / "D" / "empty").mkdir(parents=True)
    return vol


def _window():
    now = datetime.now()
    return now - timedelta(days=1), now + timedelta(days=1)


def test_count_and_locate_on_a_real_tree(tree: Path):
    svc = FolderSearchService(LocalFS())
    start, end = _window()

    total = asyncio.run(svc.count_matching_directories(tree, "logs", ["excluded-temp"], start, end))
    assert total == 7

    found = asyncio.run(svc.locate_directory(tree, "logs", ["excluded-temp"]))
    assert found in {tree / "A" / "logs", tree / "B" / "C" / "logs"}


def test_files_outside_the_window_are_not_counted(tree: Path):
    svc = FolderSearchService(LocalFS(), max_concurrency=4)
    future = datetime.now() + timedelta(days=10)
    total = asyncio.run(
        svc.count_matching_directories(tree, "logs", ["excluded-temp"], start=future)
    )
    assert total == 0


@pytest.mark.skipif(
    not hasattr(os, "geteuid") or os.geteuid() == 0,
    reason="permission bits are not enforced for root",
)
def test_unreadable_subtree_is_skipped(tree: Path):
    locked = tree / "B"
    locked.chmod(0)
    try:
        svc = FolderSearchService(LocalFS())
        start, end = _window()
        total = asyncio.run(
            svc.count_matching_directories(tree, "logs", ["excluded-temp"], start, end)
        )
        assert total == 2
        found = asyncio.run(svc.locate_directory(tree, "logs", ["excluded-temp"]))
        assert found == tree / "A" / "logs"
    finally:
        locked.chmod(0o755)


def test_volume_scanner_over_explicit_roots(tmp_path: Path, tree: Path):
    empty_volume = tmp_path / "empty"
    empty_volume.mkdir()
    scanner = VolumeScanner(
        FolderSearchService(LocalFS(volume_roots=[tmp_path / "missing", empty_volume, tree]))
    )
    start, end = _window()

    path, count = asyncio.run(
        scanner.count_across_volumes("logs", ["excluded-temp"], start, end)
    )
    assert count == 7
    assert path is not None and path.name == "logs"

    assert asyncio.run(scanner.locate_across_volumes("C")) == tree / "B" / "C"
