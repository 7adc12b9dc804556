"""
Writer Options — configuration consumed by the CSV and JSON writers.

Options are plain frozen dataclasses; each writer validates them once in
its constructor.
"""

from dataclasses import dataclass, field
from typing import Literal

WriterType = Literal["csv", "json"]
WriterMode = Literal["write", "append"]

WRITER_TYPES = ("csv", "json")
WRITER_MODES = ("write", "append")

DEFAULT_BATCH_SIZE = 100


@dataclass(frozen=True)
class CsvConfig:
    """CSV output settings."""

    delimiter: str = ","
    quote: str = '"'
    headers: list[str] | None = None  # Labels used verbatim
    include_keys: list[str] | None = None  # Keys to export, in order
    column_mapping: dict[str, str] | None = None  # key -> label
    include_utf8_bom: bool = False
    flatten_nested: bool = False


@dataclass(frozen=True)
class JsonConfig:
    """JSON output settings."""

    pretty_print: bool = True
    indent: int = 2
    include_utf8_bom: bool = False


@dataclass(frozen=True)
class WriterOptions:
    """
    Complete configuration for one writer instance.

    ``mode="write"`` truncates the target on every write; ``mode="append"``
    extends whatever is already on disk.
    """

    type: WriterType
    file: str
    mode: WriterMode = "write"
    csv: CsvConfig = field(default_factory=CsvConfig)
    json: JsonConfig = field(default_factory=JsonConfig)
