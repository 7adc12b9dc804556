"""Format writers for exported records."""

from outport.errors import ValidationError
from outport.io.sink import FileSink
from outport.models.options import WriterOptions
from outport.writers.base import Writer
from outport.writers.csv_writer import CsvWriter
from outport.writers.json_writer import JsonWriter


def get_writer(options: WriterOptions, sink: FileSink | None = None) -> Writer:
    """Factory function to create a writer for the configured format."""
    match options.type:
        case "csv":
            return CsvWriter(options, sink=sink)
        case "json":
            return JsonWriter(options, sink=sink)
        case _:
            raise ValidationError(f"Unknown writer type: {options.type!r}. Use 'csv' or 'json'.")


__all__ = ["Writer", "CsvWriter", "JsonWriter", "get_writer"]
