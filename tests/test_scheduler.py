"""Tests for batched execution."""

from __future__ import annotations

import threading
import time

import pytest

from filesift.classification.scheduler import BatchScheduler, partition


def test_partition_sizes() -> None:
    batches = list(partition(list(range(12)), 5))

    assert [len(batch) for batch in batches] == [5, 5, 2]
    assert [item for batch in batches for item in batch] == list(range(12))

    with pytest.raises(ValueError):
        list(partition([1], 0))


def test_scheduler_rejects_non_positive_batch_size() -> None:
    with pytest.raises(ValueError):
        BatchScheduler(0)


def test_failures_do_not_abort_siblings() -> None:
    def work(item: int) -> int:
        if item == 3:
            raise OSError("unreadable")
        return item * 10

    batches: list[list] = []
    finished = BatchScheduler(4).run(
        list(range(6)), work, should_stop=lambda: False, on_batch=batches.append
    )

    assert finished is True
    assert [len(batch) for batch in batches] == [4, 2]
    flat = [outcome for batch in batches for outcome in batch]
    assert [outcome.item for outcome in flat] == list(range(6))
    failed = [outcome for outcome in flat if not outcome.ok]
    assert [outcome.item for outcome in failed] == [3]
    assert isinstance(failed[0].error, OSError)
    assert [outcome.result for outcome in flat if outcome.ok] == [0, 10, 20, 40, 50]


def test_stop_is_checked_between_batches() -> None:
    batches: list[list] = []
    calls = {"count": 0}

    def should_stop() -> bool:
        calls["count"] += 1
        return calls["count"] > 1

    finished = BatchScheduler(2).run(
        list(range(6)), lambda item: item, should_stop=should_stop, on_batch=batches.append
    )

    assert finished is False
    assert len(batches) == 1
    assert [outcome.item for outcome in batches[0]] == [0, 1]


def test_concurrency_is_bounded_by_batch_size() -> None:
    lock = threading.Lock()
    state = {"active": 0, "peak": 0}

    def work(item: int) -> int:
        with lock:
            state["active"] += 1
            state["peak"] = max(state["peak"], state["active"])
        time.sleep(0.01)
        with lock:
            state["active"] -= 1
        return item

    def on_batch(outcomes: list) -> None:
        assert state["active"] == 0

    BatchScheduler(3).run(list(range(10)), work, should_stop=lambda: False, on_batch=on_batch)

    assert 1 <= state["peak"] <= 3


def test_empty_input_completes() -> None:
    batches: list[list] = []

    assert BatchScheduler(5).run([], lambda item: item, should_stop=lambda: False, on_batch=batches.append)
    assert batches == []
