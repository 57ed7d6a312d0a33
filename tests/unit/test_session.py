# tests/unit/test_session.py
import threading
from pathlib import Path

import pytest

from logsift.domain import AggregateCount, SearchSession


def test_first_commit_wins_and_signals_cancellation():
    s = SearchSession()
    assert s.found is None and not s.cancelled

    assert s.try_commit(Path("/vol/a/logs")) is True
    assert s.try_commit(Path("/vol/b/logs")) is False

    assert s.found == Path("/vol/a/logs")
    assert s.cancelled


def test_cancel_without_match():
    s = SearchSession()
    s.cancel()
    assert s.cancelled
    assert s.found is None
    # a later match may still be recorded once
    assert s.try_commit(Path("/x"))


def test_concurrent_commits_produce_exactly_one_winner():
    s = SearchSession()
    barrier = threading.Barrier(16)
    wins = []

    def worker(i: int) -> None:
        barrier.wait()
        if s.try_commit(Path(f"/vol/{i}/logs")):
            wins.append(i)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(wins) == 1
    assert s.found == Path(f"/vol/{wins[0]}/logs")


def test_aggregate_count_only_increases():
    total = AggregateCount()
    assert total.add(2) == 2
    assert total.add(0) == 2
    assert total.add(5) == 7
    with pytest.raises(ValueError):
        total.add(-1)
    assert total.value == 7


def test_aggregate_count_is_thread_safe():
    total = AggregateCount()

    def worker() -> None:
        for _ in range(1000):
            total.add(1)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert total.value == 8000
