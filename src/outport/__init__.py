"""
Outport - Export records to CSV and JSON files.

Writes whole arrays, appends incrementally, and streams records from
asynchronous sources in bounded batches.
"""

__version__ = "1.0.0"


def __getattr__(name: str):
    """Lazy import for the public entry points."""
    if name in ("outport", "OutportBuilder"):
        from outport import builder

        return getattr(builder, name)
    if name in ("CsvWriter", "JsonWriter", "get_writer"):
        from outport import writers

        return getattr(writers, name)
    if name == "StreamingWriter":
        from outport.core.streaming import StreamingWriter

        return StreamingWriter
    if name == "BatchProcessor":
        from outport.core.batch import BatchProcessor

        return BatchProcessor
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "outport",
    "OutportBuilder",
    "CsvWriter",
    "JsonWriter",
    "get_writer",
    "StreamingWriter",
    "BatchProcessor",
    "__version__",
]
