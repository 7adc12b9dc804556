"""
Streaming Writer — drives a format writer from a lazy record source.

The first batch goes through the writer's ``write`` path (creating the
file and, for CSV, its header line); every later batch goes through
``append``. Because both paths produce the same bytes for the same rows,
streaming ``n`` records yields the same file as one ``write`` of all ``n``.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from contextlib import aclosing

from outport.core.batch import BatchProcessor, Source, iterate
from outport.core.hooks import ProgressHook, maybe_await
from outport.models.options import DEFAULT_BATCH_SIZE
from outport.models.result import Err, Ok, Result
from outport.writers.base import Record, Writer

logger = logging.getLogger(__name__)

Transform = Callable[[Record], "Record | None | Awaitable[Record | None]"]


class StreamingWriter:
    """
    Streams records from a source to a writer in batches.

    A single instance must not run two streams at once; the underlying
    writer's header and in-memory state are not safe for concurrent use.
    """

    def __init__(
        self,
        writer: Writer,
        batch_size: int = DEFAULT_BATCH_SIZE,
        on_progress: ProgressHook | None = None,
        initialize_with_first_batch: bool = True,
    ):
        self.writer = writer
        self.batch_processor: BatchProcessor[Record] = BatchProcessor(batch_size)
        self.on_progress = on_progress
        self.initialize_with_first_batch = initialize_with_first_batch

    async def stream(self, source: Source) -> Result[int]:
        """
        Stream ``source`` to the writer.

        Returns ``Ok(total)`` with the number of records written. The first
        failure (from the writer, the progress hook or the source itself)
        stops the stream and is returned as ``Err``.
        """
        is_first_batch = self.initialize_with_first_batch
        processed = 0

        async def handle_batch(batch: list[Record], batch_number: int) -> None:
            nonlocal is_first_batch, processed

            if is_first_batch:
                result = await self.writer.write(batch)
                is_first_batch = False
            else:
                result = await self.writer.append(batch)

            if not result.success:
                raise result.error

            processed += len(batch)
            logger.debug(f"Batch {batch_number}: {len(batch)} records ({processed} total)")

            if self.on_progress:
                await maybe_await(self.on_progress(processed))

        try:
            total = await self.batch_processor.process(source, handle_batch)
        except Exception as e:
            logger.error(f"Stream aborted after {processed} records: {e}")
            return Err(e)

        logger.info(f"Stream complete: {total} records written")
        return Ok(total)

    async def stream_with_transform(self, source: Source, transform: Transform) -> Result[int]:
        """Stream ``source`` after mapping each record; ``None`` skips it."""
        return await self.stream(self._transformed(source, transform))

    @staticmethod
    async def _transformed(source: Source, transform: Transform):
        async with aclosing(iterate(source)) as records:
            async for record in records:
                transformed = await maybe_await(transform(record))
                if transformed is not None:
                    yield transformed
