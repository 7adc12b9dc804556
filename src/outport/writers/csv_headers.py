"""
CSV Header Manager — resolves the column set of a CSV file exactly once.

The first record a writer sees (or the configured ``include_keys``) fixes
the keys and header labels for the rest of the writer's life. Later records
are coerced to that key order: missing keys give empty cells and extra keys
are dropped.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from outport.errors import HeaderInitializationError
from outport.models.options import CsvConfig
from outport.models.result import Err, Ok, Result


class CsvHeaderManager:
    """Resolves and holds the header labels and keys of one CSV writer."""

    def __init__(self, config: CsvConfig | None = None):
        self.config = config or CsvConfig()
        self._headers: list[str] | None = None
        self._keys: list[str] | None = None

    def initialize(self, sample: Mapping[str, Any]) -> Result[None]:
        """
        Resolve headers and keys from config and ``sample``.

        A no-op once resolved. Keys come from ``include_keys`` when set,
        otherwise from ``sample`` in its own key order. Labels come from
        ``headers`` when set, otherwise from ``column_mapping`` (falling back
        to the key), otherwise from the keys themselves.
        """
        if self.is_initialized():
            return Ok(None)

        if self.config.include_keys:
            keys = list(self.config.include_keys)
        else:
            keys = [str(key) for key in sample.keys()]

        if not keys:
            return Err(HeaderInitializationError("Cannot determine headers from empty object"))

        if self.config.headers:
            headers = list(self.config.headers)
        elif self.config.column_mapping:
            mapping = self.config.column_mapping
            headers = [mapping.get(key, key) for key in keys]
        else:
            headers = list(keys)

        self._keys = keys
        self._headers = headers
        return Ok(None)

    def get_headers(self) -> list[str]:
        if self._headers is None:
            raise HeaderInitializationError("Headers not initialized")
        return self._headers

    def get_keys(self) -> list[str]:
        if self._keys is None:
            raise HeaderInitializationError("Keys not initialized")
        return self._keys

    def object_to_values(self, record: Mapping[str, Any]) -> list[Any]:
        """Values of ``record`` in column order."""
        return [record.get(key) for key in self.get_keys()]

    def is_initialized(self) -> bool:
        return self._headers is not None and self._keys is not None
