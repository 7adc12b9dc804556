"""
CSV Writer — writes and appends records to a CSV file.

Header resolution is delegated to ``CsvHeaderManager`` and value escaping
to ``CsvFormatter``; this class owns the write/append state machine and the
interaction with the file sink.

    writer = CsvWriter(WriterOptions(type="csv", file="users.csv"))
    result = await writer.write([{"id": 1, "name": "John"}])
    if not result.success:
        print(result.error)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from outport.errors import CsvFormattingError, ValidationError
from outport.io.sink import FileSink, LocalFileSink
from outport.models.options import WriterOptions
from outport.models.result import Err, Ok, Result
from outport.writers.base import (
    EMPTY_WRITE_MESSAGE,
    UTF8_BOM,
    Record,
    as_batch,
    check_records,
    validate_options,
)
from outport.writers.csv_format import CsvFormatter
from outport.writers.csv_headers import CsvHeaderManager
from outport.writers.flatten import flatten_object

logger = logging.getLogger(__name__)


class CsvWriter:
    """
    Exports records to a CSV file.

    The header line is resolved from the first record written (or from the
    configured keys) and then fixed. In ``write`` mode every ``write`` call
    rewrites the header line, truncating the file, before appending its
    rows. In ``append`` mode the header is only written when the file does
    not exist yet.
    """

    def __init__(self, options: WriterOptions, sink: FileSink | None = None):
        self._validate(options)
        self.options = options
        self.path = str(options.file)
        self.sink = sink or LocalFileSink()

        config = options.csv
        self.formatter = CsvFormatter(config.delimiter, config.quote)
        self.header_manager = CsvHeaderManager(config)
        self.include_utf8_bom = config.include_utf8_bom
        self.flatten_nested = config.flatten_nested

    @staticmethod
    def _validate(options: WriterOptions) -> None:
        validate_options(options, "csv", "CsvWriter")

        if len(options.csv.delimiter) != 1:
            raise ValidationError("Delimiter must be a single character")

        if len(options.csv.quote) != 1:
            raise ValidationError("Quote character must be a single character")

    # ──────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────

    def write_sync(self, records: Sequence[Record]) -> Result[None]:
        """Write ``records``; in ``write`` mode this replaces the file."""
        prepared = self._prepare_write(records)
        if not prepared.success:
            return prepared
        rows, just_initialized = prepared.value
        content = self._format_rows(rows)
        if not content.success:
            return content

        if self.options.mode == "write" or just_initialized:
            result = self._write_headers_sync(overwrite=self.options.mode == "write")
            if not result.success:
                return result

        return self._append_rows_sync(content.value, len(rows))

    async def write(self, records: Sequence[Record]) -> Result[None]:
        """Write ``records``; in ``write`` mode this replaces the file."""
        prepared = self._prepare_write(records)
        if not prepared.success:
            return prepared
        rows, just_initialized = prepared.value
        content = self._format_rows(rows)
        if not content.success:
            return content

        if self.options.mode == "write" or just_initialized:
            result = await self._write_headers(overwrite=self.options.mode == "write")
            if not result.success:
                return result

        return await self._append_rows(content.value, len(rows))

    def append_sync(self, data: Record | Sequence[Record]) -> Result[None]:
        """Append one record or a batch; an empty batch is a no-op."""
        prepared = self._prepare_append(data)
        if not prepared.success:
            return prepared
        rows, just_initialized = prepared.value
        if not rows:
            return Ok(None)
        content = self._format_rows(rows)
        if not content.success:
            return content

        if just_initialized:
            result = self._write_headers_sync(overwrite=False)
            if not result.success:
                return result

        return self._append_rows_sync(content.value, len(rows))

    async def append(self, data: Record | Sequence[Record]) -> Result[None]:
        """Append one record or a batch; an empty batch is a no-op."""
        prepared = self._prepare_append(data)
        if not prepared.success:
            return prepared
        rows, just_initialized = prepared.value
        if not rows:
            return Ok(None)
        content = self._format_rows(rows)
        if not content.success:
            return content

        if just_initialized:
            result = await self._write_headers(overwrite=False)
            if not result.success:
                return result

        return await self._append_rows(content.value, len(rows))

    # ──────────────────────────────────────────────
    # Preparation
    # ──────────────────────────────────────────────

    def _prepare_write(self, records: Sequence[Record]) -> Result[tuple[list[Record], bool]]:
        if records is None or isinstance(records, (str, bytes)):
            return Err(ValidationError(EMPTY_WRITE_MESSAGE))
        batch = list(records)
        if not batch:
            return Err(ValidationError(EMPTY_WRITE_MESSAGE))
        return self._prepare(batch)

    def _prepare_append(self, data: Record | Sequence[Record]) -> Result[tuple[list[Record], bool]]:
        batch = as_batch(data)
        if not batch:
            return Ok(([], False))
        return self._prepare(batch)

    def _prepare(self, batch: list[Record]) -> Result[tuple[list[Record], bool]]:
        """Flatten if configured and resolve headers on first use."""
        invalid = check_records(batch)
        if invalid:
            return invalid

        if self.flatten_nested:
            try:
                batch = [flatten_object(record) for record in batch]
            except (TypeError, ValueError, RecursionError) as e:
                return Err(CsvFormattingError(f"Failed to flatten record: {e}"))

        just_initialized = False
        if not self.header_manager.is_initialized():
            result = self.header_manager.initialize(batch[0])
            if not result.success:
                return result
            just_initialized = True
            logger.debug(f"Resolved CSV headers for {self.path}: {self.header_manager.get_headers()}")

        return Ok((batch, just_initialized))

    # ──────────────────────────────────────────────
    # Headers
    # ──────────────────────────────────────────────

    def _header_content(self) -> str:
        line = self.formatter.format_row(self.header_manager.get_headers()) + "\n"
        return UTF8_BOM + line if self.include_utf8_bom else line

    def _write_headers_sync(self, overwrite: bool) -> Result[None]:
        if not overwrite and self.sink.exists_sync(self.path):
            return Ok(None)
        return self.sink.write_sync(self.path, self._header_content())

    async def _write_headers(self, overwrite: bool) -> Result[None]:
        if not overwrite and await self.sink.exists(self.path):
            return Ok(None)
        return await self.sink.write(self.path, self._header_content())

    # ──────────────────────────────────────────────
    # Rows
    # ──────────────────────────────────────────────

    def _format_rows(self, rows: list[Record]) -> Result[str]:
        try:
            lines = [
                self.formatter.format_row(self.header_manager.object_to_values(row)) for row in rows
            ]
            content = "\n".join(lines) + "\n"
            # Files are UTF-8; lone surrogates cannot be written.
            content.encode("utf-8")
        except (TypeError, ValueError, RecursionError) as e:
            return Err(CsvFormattingError(str(e)))
        return Ok(content)

    def _append_rows_sync(self, content: str, count: int) -> Result[None]:
        logger.debug(f"Appending {count} rows to {self.path}")
        return self.sink.append_sync(self.path, content)

    async def _append_rows(self, content: str, count: int) -> Result[None]:
        logger.debug(f"Appending {count} rows to {self.path}")
        return await self.sink.append(self.path, content)
