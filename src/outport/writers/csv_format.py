"""Escape values and join them into CSV rows."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

from outport.writers.json_format import to_compact_json


class CsvFormatter:
    """
    Renders one row of values as a CSV line (without the trailing newline).

    A value is quoted only when it contains the delimiter, the quote
    character, ``\\n`` or ``\\r``; embedded quote characters are doubled.
    Numbers use Python's own ``str`` form, so ``1e20`` renders as
    ``1e+20`` and non-finite floats as ``nan`` / ``inf``.
    """

    def __init__(self, delimiter: str = ",", quote: str = '"'):
        self.delimiter = delimiter
        self.quote = quote
        self._specials = (delimiter, quote, "\n", "\r")

    def format_row(self, values: Iterable[Any]) -> str:
        return self.delimiter.join(self.format_value(value) for value in values)

    def format_value(self, value: Any) -> str:
        if value is None:
            return ""

        if isinstance(value, str):
            text = value
        elif isinstance(value, bool):
            text = "true" if value else "false"
        elif isinstance(value, (int, float)):
            text = str(value)
        elif isinstance(value, (datetime, date)):
            text = value.isoformat()
        else:
            text = to_compact_json(value)

        if any(special in text for special in self._specials):
            escaped = text.replace(self.quote, self.quote * 2)
            return f"{self.quote}{escaped}{self.quote}"

        return text
