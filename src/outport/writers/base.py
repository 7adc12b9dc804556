"""
Writer Protocol — the write/append contract shared by all format writers.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from outport.errors import ValidationError
from outport.models.options import WRITER_MODES, WriterOptions
from outport.models.result import Err, Result

Record = Mapping[str, Any]

UTF8_BOM = "\ufeff"
EMPTY_WRITE_MESSAGE = "Cannot write empty data array"


@runtime_checkable
class Writer(Protocol):
    """
    Protocol that all format writers implement.

    In ``write`` mode, ``write`` replaces the file contents; in ``append``
    mode it extends them. ``append`` always extends, creating the file (and
    its header, for CSV) when missing. None of these raise: failures come
    back as ``Err``.
    """

    def write_sync(self, records: Sequence[Record]) -> Result[None]: ...

    async def write(self, records: Sequence[Record]) -> Result[None]: ...

    def append_sync(self, data: Record | Sequence[Record]) -> Result[None]: ...

    async def append(self, data: Record | Sequence[Record]) -> Result[None]: ...


def validate_options(options: WriterOptions, writer_type: str, writer_name: str) -> None:
    """Checks shared by every writer; raises ``ValidationError``."""
    if options.type != writer_type:
        raise ValidationError(f"Invalid writer type for {writer_name}")

    if not options.file:
        raise ValidationError(f"File path must be provided for {writer_name}")

    if not str(options.file).endswith(f".{writer_type}"):
        raise ValidationError(f"File extension must be .{writer_type} for {writer_name}")

    if options.mode not in WRITER_MODES:
        raise ValidationError(f"Invalid write mode {options.mode!r}. Use 'write' or 'append'.")


def as_batch(data: Record | Sequence[Record]) -> list[Record]:
    """Normalize a lone record or a sequence of records to a list."""
    if isinstance(data, Mapping):
        return [data]
    return list(data)


def check_records(records: Sequence[Any]) -> Err | None:
    """Return an ``Err`` when any item is not a mapping."""
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            return Err(
                ValidationError(
                    f"Record at index {index} must be a mapping, got {type(record).__name__}"
                )
            )
    return None
