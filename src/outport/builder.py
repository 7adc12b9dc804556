"""
Outport Builder — fluent configuration for one-off exports.

    result = await (
        outport()
        .to("./users.csv")
        .with_delimiter(";")
        .on_progress(lambda current, total=None: print(current, total))
        .write(users)
    )

Each terminal call (``write``, ``append``, ``stream``, ...) builds a fresh
writer from the current configuration.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Sequence
from dataclasses import replace

from outport.core.batch import Source
from outport.core.hooks import (
    AfterWriteHook,
    BeforeWriteHook,
    CompleteHook,
    ErrorHook,
    LifecycleHooks,
    ProgressHook,
    maybe_await,
    require_sync,
)
from outport.core.streaming import StreamingWriter
from outport.errors import ValidationError
from outport.io.sink import FileSink
from outport.models.options import (
    DEFAULT_BATCH_SIZE,
    CsvConfig,
    JsonConfig,
    WriterMode,
    WriterOptions,
    WriterType,
)
from outport.models.result import Err, Ok, Result
from outport.writers import get_writer
from outport.writers.base import Record, Writer

logger = logging.getLogger(__name__)


class OutportBuilder:
    """Chainable builder that assembles ``WriterOptions`` and runs an export."""

    def __init__(self, sink: FileSink | None = None):
        self.sink = sink
        self.file_path: str | None = None
        self.writer_type: WriterType | None = None
        self.mode: WriterMode = "write"
        self.csv_config = CsvConfig()
        self.json_config = JsonConfig()
        self.hooks = LifecycleHooks()
        self.batch_size = DEFAULT_BATCH_SIZE

    # ──────────────────────────────────────────────
    # Target
    # ──────────────────────────────────────────────

    def to(self, path: str) -> OutportBuilder:
        """Set the output file; ``.csv`` / ``.json`` also selects the format."""
        self.file_path = str(path)
        if self.writer_type is None:
            if self.file_path.endswith(".csv"):
                self.writer_type = "csv"
            elif self.file_path.endswith(".json"):
                self.writer_type = "json"
        return self

    def as_type(self, writer_type: WriterType) -> OutportBuilder:
        self.writer_type = writer_type
        return self

    def in_mode(self, mode: WriterMode) -> OutportBuilder:
        self.mode = mode
        return self

    # ──────────────────────────────────────────────
    # CSV options
    # ──────────────────────────────────────────────

    def with_delimiter(self, delimiter: str) -> OutportBuilder:
        self.csv_config = replace(self.csv_config, delimiter=delimiter)
        return self

    def with_quote(self, quote: str) -> OutportBuilder:
        self.csv_config = replace(self.csv_config, quote=quote)
        return self

    def with_headers(self, headers: Sequence[str]) -> OutportBuilder:
        self.csv_config = replace(self.csv_config, headers=list(headers))
        return self

    def with_columns(self, keys: Sequence[str]) -> OutportBuilder:
        self.csv_config = replace(self.csv_config, include_keys=list(keys))
        return self

    def with_column_mapping(self, mapping: dict[str, str]) -> OutportBuilder:
        self.csv_config = replace(self.csv_config, column_mapping=dict(mapping))
        return self

    def with_flattening(self, flatten: bool = True) -> OutportBuilder:
        self.csv_config = replace(self.csv_config, flatten_nested=flatten)
        return self

    def with_utf8_bom(self, include: bool = True) -> OutportBuilder:
        """Prefix the file with a UTF-8 BOM (applies to the selected format)."""
        if self.writer_type == "csv" or (self.file_path or "").endswith(".csv"):
            self.csv_config = replace(self.csv_config, include_utf8_bom=include)
        else:
            self.json_config = replace(self.json_config, include_utf8_bom=include)
        return self

    # ──────────────────────────────────────────────
    # JSON options
    # ──────────────────────────────────────────────

    def pretty_print(self, pretty: bool = True) -> OutportBuilder:
        self.json_config = replace(self.json_config, pretty_print=pretty)
        return self

    def with_indent(self, spaces: int) -> OutportBuilder:
        self.json_config = replace(self.json_config, indent=spaces)
        return self

    # ──────────────────────────────────────────────
    # Streaming and hooks
    # ──────────────────────────────────────────────

    def with_batch_size(self, size: int) -> OutportBuilder:
        self.batch_size = size
        return self

    def on_before_write(self, hook: BeforeWriteHook) -> OutportBuilder:
        self.hooks.before_write = hook
        return self

    def on_after_write(self, hook: AfterWriteHook) -> OutportBuilder:
        self.hooks.after_write = hook
        return self

    def on_progress(self, hook: ProgressHook) -> OutportBuilder:
        self.hooks.on_progress = hook
        return self

    def on_error(self, hook: ErrorHook) -> OutportBuilder:
        self.hooks.on_error = hook
        return self

    def on_complete(self, hook: CompleteHook) -> OutportBuilder:
        self.hooks.on_complete = hook
        return self

    # ──────────────────────────────────────────────
    # Terminal operations
    # ──────────────────────────────────────────────

    def build_options(self) -> WriterOptions:
        """Assemble the writer options, raising ``ValidationError`` if incomplete."""
        if not self.file_path:
            raise ValidationError("File path must be specified using .to()")

        if self.writer_type is None:
            raise ValidationError(
                "Could not determine writer type. Use .as_type() or a .csv/.json file extension"
            )

        return WriterOptions(
            type=self.writer_type,
            file=self.file_path,
            mode=self.mode,
            csv=self.csv_config,
            json=self.json_config,
        )

    def create_writer(self) -> Writer:
        return get_writer(self.build_options(), sink=self.sink)

    def write_sync(self, records: Sequence[Record]) -> Result[None]:
        """
        Write records synchronously, running the hooks in order.

        Hooks must be synchronous here: a coroutine function is rejected
        before any I/O happens, and any other hook returning an awaitable
        fails the operation.
        """
        writer = self.create_writer()
        total = len(records)

        for name, hook in self._registered_hooks():
            if inspect.iscoroutinefunction(hook):
                return Err(ValidationError(f"Cannot use async {name} hook with write_sync"))

        try:
            if self.hooks.before_write:
                records = require_sync(self.hooks.before_write(records), "before_write")
                total = len(records)

            if self.hooks.on_progress:
                require_sync(self.hooks.on_progress(0, total), "on_progress")

            result = writer.write_sync(records)

            if result.success:
                if self.hooks.on_progress:
                    require_sync(self.hooks.on_progress(total, total), "on_progress")
                if self.hooks.after_write:
                    require_sync(self.hooks.after_write(records, total), "after_write")
            elif self.hooks.on_error:
                require_sync(self.hooks.on_error(result.error), "on_error")

            if self.hooks.on_complete:
                require_sync(self.hooks.on_complete(result, total), "on_complete")

            return result
        except Exception as e:
            logger.error(f"write_sync to {self.file_path} failed: {e}")
            failure = Err(e)
            self._notify_failure_sync(failure, total)
            return failure

    async def write(self, records: Sequence[Record]) -> Result[None]:
        """Write records, awaiting each hook in order."""
        writer = self.create_writer()
        total = len(records)

        try:
            if self.hooks.before_write:
                records = await maybe_await(self.hooks.before_write(records))
                total = len(records)

            if self.hooks.on_progress:
                await maybe_await(self.hooks.on_progress(0, total))

            result = await writer.write(records)

            if result.success:
                if self.hooks.on_progress:
                    await maybe_await(self.hooks.on_progress(total, total))
                if self.hooks.after_write:
                    await maybe_await(self.hooks.after_write(records, total))
            elif self.hooks.on_error:
                await maybe_await(self.hooks.on_error(result.error))

            if self.hooks.on_complete:
                await maybe_await(self.hooks.on_complete(result, total))

            return result
        except Exception as e:
            logger.error(f"write to {self.file_path} failed: {e}")
            failure = Err(e)
            await self._notify_failure(failure, total)
            return failure

    def append_sync(self, data: Record | Sequence[Record]) -> Result[None]:
        return self.create_writer().append_sync(data)

    async def append(self, data: Record | Sequence[Record]) -> Result[None]:
        return await self.create_writer().append(data)

    async def from_async_generator(self, source: Source) -> Result[int]:
        """Stream ``source`` in batches; the first batch initializes the file."""
        streaming_writer = StreamingWriter(
            self.create_writer(),
            batch_size=self.batch_size,
            on_progress=self.hooks.on_progress,
        )

        result = await streaming_writer.stream(source)

        try:
            if result.success:
                if self.hooks.on_complete:
                    await maybe_await(self.hooks.on_complete(Ok(None), result.value))
            elif self.hooks.on_error:
                await maybe_await(self.hooks.on_error(result.error))
        except Exception as e:
            logger.error(f"Lifecycle hook failed after streaming to {self.file_path}: {e}")
            return Err(e)

        return result

    async def stream(self, factory: Callable[[], Source]) -> Result[int]:
        """Stream from a zero-argument callable returning the source."""
        return await self.from_async_generator(factory())

    # ──────────────────────────────────────────────
    # Helpers
    # ──────────────────────────────────────────────

    def _registered_hooks(self):
        for name in ("before_write", "after_write", "on_progress", "on_error", "on_complete"):
            hook = getattr(self.hooks, name)
            if hook is not None:
                yield name, hook

    def _notify_failure_sync(self, failure: Err, total: int) -> None:
        try:
            if self.hooks.on_error:
                require_sync(self.hooks.on_error(failure.error), "on_error")
            if self.hooks.on_complete:
                require_sync(self.hooks.on_complete(failure, total), "on_complete")
        except Exception as e:
            logger.error(f"Lifecycle hook failed: {e}")

    async def _notify_failure(self, failure: Err, total: int) -> None:
        try:
            if self.hooks.on_error:
                await maybe_await(self.hooks.on_error(failure.error))
            if self.hooks.on_complete:
                await maybe_await(self.hooks.on_complete(failure, total))
        except Exception as e:
            logger.error(f"Lifecycle hook failed: {e}")


def outport(sink: FileSink | None = None) -> OutportBuilder:
    """Create a new builder: ``await outport().to("out.csv").write(rows)``."""
    return OutportBuilder(sink=sink)
