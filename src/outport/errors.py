"""
Error taxonomy for outport.

Construction-time problems are raised; everything that happens after a
writer exists is returned inside an ``Err`` result.
"""

from __future__ import annotations


class OutportError(Exception):
    """Base class for all outport errors."""


class ValidationError(OutportError):
    """Invalid configuration, or misuse such as writing an empty list."""


class HeaderInitializationError(OutportError):
    """CSV headers could not be resolved, or were read before resolution."""


class CsvFormattingError(OutportError):
    """A record could not be rendered as CSV."""


class JsonFormattingError(OutportError):
    """Data could not be serialized to JSON, or an existing file could not be parsed."""


class FileWriteError(OutportError):
    """A file sink operation failed."""

    def __init__(self, message: str, original_error: BaseException | None = None):
        super().__init__(message)
        self.original_error = original_error
        if original_error is not None:
            self.__cause__ = original_error
