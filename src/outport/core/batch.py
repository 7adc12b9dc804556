"""
Batch Processor — groups a lazy source into bounded batches.

Batches are handed to the handler one at a time, and the next item is not
pulled from the source until the current handler has finished. A slow
handler therefore throttles how fast the source is drained.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Callable, Iterable
from contextlib import aclosing
from typing import Generic, TypeVar

from outport.core.hooks import maybe_await
from outport.errors import ValidationError
from outport.models.options import DEFAULT_BATCH_SIZE

logger = logging.getLogger(__name__)

T = TypeVar("T")

Source = AsyncIterable[T] | Iterable[T]
BatchHandler = Callable[[list[T], int], "Awaitable[None] | None"]


async def iterate(source: Source) -> AsyncIterator[T]:
    """
    Iterate an async iterable or a plain iterable asynchronously.

    Generator sources are closed when this iterator is closed, so an early
    exit releases whatever the source holds open.
    """
    try:
        if isinstance(source, AsyncIterable):
            async for item in source:
                yield item
        else:
            for item in source:
                yield item
    finally:
        if inspect.isasyncgen(source):
            await source.aclose()
        elif inspect.isgenerator(source):
            source.close()


class BatchProcessor(Generic[T]):
    """Processes items from a source in fixed-size batches."""

    def __init__(self, batch_size: int = DEFAULT_BATCH_SIZE):
        if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
            raise ValidationError("Batch size must be a positive integer")
        self.batch_size = batch_size

    async def process(self, source: Source, on_batch: BatchHandler) -> int:
        """
        Feed ``source`` to ``on_batch`` in batches.

        ``on_batch(batch, batch_number)`` is called with 1-based batch
        numbers; the last batch may be smaller than ``batch_size``. Returns
        the total number of items processed (0 for an empty source).
        """
        batch: list[T] = []
        total = 0
        batch_number = 0

        async with aclosing(iterate(source)) as items:
            async for item in items:
                batch.append(item)

                if len(batch) >= self.batch_size:
                    batch_number += 1
                    await maybe_await(on_batch(batch, batch_number))
                    total += len(batch)
                    batch = []

        if batch:
            batch_number += 1
            await maybe_await(on_batch(batch, batch_number))
            total += len(batch)

        logger.debug(f"Processed {total} items in {batch_number} batches")
        return total

    async def collect_all(self, source: Source) -> list[T]:
        """Collect every item. Loads the whole source into memory."""
        return [item async for item in iterate(source)]

    async def collect_limit(self, source: Source, limit: int) -> list[T]:
        """Collect at most ``limit`` items, pulling no more than that."""
        items: list[T] = []
        if limit <= 0:
            return items

        async with aclosing(iterate(source)) as items_iter:
            async for item in items_iter:
                items.append(item)
                if len(items) >= limit:
                    break

        return items
