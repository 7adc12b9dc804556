"""
JSON Writer — writes and appends records to a JSON array file.

JSON has no row-append primitive: the file always holds one array literal,
so the writer keeps the whole array in memory and rewrites the file on
every call.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from outport.errors import JsonFormattingError, ValidationError
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
from outport.writers.json_format import JsonFormatter

logger = logging.getLogger(__name__)


class JsonWriter:
    """
    Exports records to a JSON file holding a single array.

    In ``append`` mode, existing file content is loaded into memory on the
    first call and every later call extends that array. In ``write`` mode,
    ``write`` replaces the array and ``append`` extends whatever this writer
    has written so far.
    """

    def __init__(self, options: WriterOptions, sink: FileSink | None = None):
        self._validate(options)
        self.options = options
        self.path = str(options.file)
        self.sink = sink or LocalFileSink()

        config = options.json
        self.formatter = JsonFormatter(config.pretty_print, config.indent)
        self.include_utf8_bom = config.include_utf8_bom

        self.records: list[Any] = []
        self.loaded = False

    @staticmethod
    def _validate(options: WriterOptions) -> None:
        validate_options(options, "json", "JsonWriter")

        indent = options.json.indent
        if isinstance(indent, bool) or not isinstance(indent, int) or not 0 <= indent <= 10:
            raise ValidationError("Indent must be between 0 and 10")

    # ──────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────

    def write_sync(self, records: Sequence[Record]) -> Result[None]:
        """Write ``records``; in ``append`` mode they extend the existing array."""
        if records is None or isinstance(records, (str, bytes)):
            return Err(ValidationError(EMPTY_WRITE_MESSAGE))
        records = list(records)
        if not records:
            return Err(ValidationError(EMPTY_WRITE_MESSAGE))
        invalid = check_records(records)
        if invalid:
            return invalid

        if self.options.mode == "write":
            return self._persist_sync(records)

        loaded = self._load_existing_sync()
        if not loaded.success:
            return loaded
        return self._persist_sync(self.records + records)

    async def write(self, records: Sequence[Record]) -> Result[None]:
        """Write ``records``; in ``append`` mode they extend the existing array."""
        if records is None or isinstance(records, (str, bytes)):
            return Err(ValidationError(EMPTY_WRITE_MESSAGE))
        records = list(records)
        if not records:
            return Err(ValidationError(EMPTY_WRITE_MESSAGE))
        invalid = check_records(records)
        if invalid:
            return invalid

        if self.options.mode == "write":
            return await self._persist(records)

        loaded = await self._load_existing()
        if not loaded.success:
            return loaded
        return await self._persist(self.records + records)

    def append_sync(self, data: Record | Sequence[Record]) -> Result[None]:
        """Append one record or a batch; an empty batch is a no-op."""
        batch = as_batch(data)
        if not batch:
            return Ok(None)
        invalid = check_records(batch)
        if invalid:
            return invalid

        loaded = self._load_existing_sync()
        if not loaded.success:
            return loaded
        return self._persist_sync(self.records + batch)

    async def append(self, data: Record | Sequence[Record]) -> Result[None]:
        """Append one record or a batch; an empty batch is a no-op."""
        batch = as_batch(data)
        if not batch:
            return Ok(None)
        invalid = check_records(batch)
        if invalid:
            return invalid

        loaded = await self._load_existing()
        if not loaded.success:
            return loaded
        return await self._persist(self.records + batch)

    # ──────────────────────────────────────────────
    # Loading
    # ──────────────────────────────────────────────

    def _load_existing_sync(self) -> Result[None]:
        if self.loaded or self.options.mode != "append" or not self.sink.exists_sync(self.path):
            self.loaded = True
            return Ok(None)
        try:
            content = self.sink.read_sync(self.path)
        except (OSError, UnicodeDecodeError) as e:
            return Err(JsonFormattingError(f"Failed to parse existing JSON file {self.path}: {e}"))
        return self._apply_existing(content)

    async def _load_existing(self) -> Result[None]:
        if self.loaded or self.options.mode != "append" or not await self.sink.exists(self.path):
            self.loaded = True
            return Ok(None)
        try:
            content = await self.sink.read(self.path)
        except (OSError, UnicodeDecodeError) as e:
            return Err(JsonFormattingError(f"Failed to parse existing JSON file {self.path}: {e}"))
        return self._apply_existing(content)

    def _apply_existing(self, content: str) -> Result[None]:
        content = content.removeprefix(UTF8_BOM)
        if content.strip():
            try:
                parsed = json.loads(content)
            except (json.JSONDecodeError, RecursionError) as e:
                return Err(
                    JsonFormattingError(f"Failed to parse existing JSON file {self.path}: {e}")
                )
            self.records = parsed if isinstance(parsed, list) else [parsed]
            logger.debug(f"Loaded {len(self.records)} existing records from {self.path}")
        self.loaded = True
        return Ok(None)

    # ──────────────────────────────────────────────
    # Persisting
    # ──────────────────────────────────────────────

    def _render(self, records: list[Any]) -> Result[str]:
        try:
            text = self.formatter.format(records, is_array_context=True)
        except JsonFormattingError as e:
            return Err(e)
        try:
            text.encode("utf-8")
        except UnicodeEncodeError as e:
            return Err(JsonFormattingError(f"Failed to format data as JSON: {e}"))
        return Ok(UTF8_BOM + text if self.include_utf8_bom else text)

    def _persist_sync(self, records: list[Any]) -> Result[None]:
        content = self._render(records)
        if not content.success:
            return content
        result = self.sink.write_sync(self.path, content.value)
        if result.success:
            self._commit(records)
        return result

    async def _persist(self, records: list[Any]) -> Result[None]:
        content = self._render(records)
        if not content.success:
            return content
        result = await self.sink.write(self.path, content.value)
        if result.success:
            self._commit(records)
        return result

    def _commit(self, records: list[Any]) -> None:
        self.records = records
        self.loaded = True
        logger.debug(f"Wrote {len(records)} records to {self.path}")
