"""Manages bounded concurrent probe execution."""
import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")
R = TypeVar("R")


class ConcurrencyManager:
    """Runs work in fixed-size batches: concurrent inside a batch, sequential across batches."""

    def __init__(self, batch_size: int):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.batch_size = batch_size

    def batches(self, items: Sequence[T]) -> List[Sequence[T]]:
        return [items[i:i + self.batch_size] for i in range(0, len(items), self.batch_size)]

    async def run_batches(
        self,
        items: Sequence[T],
        worker: Callable[[T], Awaitable[R]],
        on_batch_start: Optional[Callable[[Sequence[T]], None]] = None,
        on_batch_done: Optional[Callable[[List[Tuple[T, R]]], None]] = None,
    ) -> List[Tuple[T, R]]:
        """
        Run ``worker`` over every item with at most ``batch_size`` in flight.

        Args:
            items: Work items, in the order results should come back.
            worker: Coroutine function applied to each item. It must not raise;
                the prober folds its own failures.
            on_batch_start: Called with each batch before it is launched.
            on_batch_done: Called with each batch's (item, result) pairs as soon
                as the batch finishes.

        Returns:
            List of (item, result) pairs in input order.
        """
        results: List[Tuple[T, R]] = []
        for batch in self.batches(items):
            if on_batch_start is not None:
                on_batch_start(batch)
            outcomes = await asyncio.gather(*(worker(item) for item in batch))
            done = list(zip(batch, outcomes))
            if on_batch_done is not None:
                on_batch_done(done)
            results.extend(done)
        return results
