"""Batched, bounded-concurrency execution."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Generic, Iterator, Optional, Sequence, TypeVar

LOGGER = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


@dataclass(slots=True)
class BatchOutcome(Generic[ItemT, ResultT]):
    """Result of running work for a single batch item.

    Exactly one of ``result`` and ``error`` is set.
    """

    item: ItemT
    result: Optional[ResultT] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def partition(items: Sequence[ItemT], size: int) -> Iterator[Sequence[ItemT]]:
    """Yield consecutive slices of ``items`` holding at most ``size`` entries."""
    if size < 1:
        raise ValueError("Batch size must be a positive integer.")
    for start in range(0, len(items), size):
        yield items[start : start + size]


class BatchScheduler:
    """Run work over fixed-size batches, joining each batch before the next.

    Cancellation is polled only at batch boundaries: a batch either runs to
    completion or never starts.
    """

    def __init__(self, batch_size: int) -> None:
        if batch_size < 1:
            raise ValueError("Batch size must be a positive integer.")
        self.batch_size = batch_size

    def run(
        self,
        items: Sequence[ItemT],
        work: Callable[[ItemT], ResultT],
        *,
        should_stop: Callable[[], bool],
        on_batch: Callable[[list[BatchOutcome[ItemT, ResultT]]], None],
    ) -> bool:
        """Process every batch in order.

        Args:
            items: Materialized work items.
            work: Function applied to each item on a worker thread.
            should_stop: Predicate polled before each batch starts.
            on_batch: Called on the coordinating thread with the batch's
                outcomes in original item order.

        Returns:
            bool: ``True`` when every batch ran, ``False`` when stopped early.
        """
        with ThreadPoolExecutor(
            max_workers=self.batch_size, thread_name_prefix="filesift"
        ) as executor:
            for index, batch in enumerate(partition(items, self.batch_size)):
                if should_stop():
                    LOGGER.debug("Stop requested before batch %d", index)
                    return False
                futures = [executor.submit(work, item) for item in batch]
                outcomes: list[BatchOutcome[ItemT, ResultT]] = []
                for item, future in zip(batch, futures):
                    try:
                        outcomes.append(BatchOutcome(item=item, result=future.result()))
                    except Exception as exc:
                        outcomes.append(BatchOutcome(item=item, error=exc))
                on_batch(outcomes)
        return True


__all__ = ["BatchOutcome", "BatchScheduler", "partition"]
