"""
JSON Formatter — renders records as JSON text.

Formatting is pure: no state beyond the pretty-print settings.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

from outport.errors import JsonFormattingError

COMPACT_SEPARATORS = (",", ":")


def json_default(value: Any) -> Any:
    """``json.dumps`` fallback: dates become ISO-8601 strings."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_compact_json(value: Any) -> str:
    """Single-line JSON with no whitespace between tokens."""
    return json.dumps(
        value,
        separators=COMPACT_SEPARATORS,
        ensure_ascii=False,
        allow_nan=False,
        default=json_default,
    )


class JsonFormatter:
    """
    Formats records as JSON.

    An indent of 0 produces compact output, the same as turning pretty
    printing off. NaN and infinite floats have no JSON representation and
    raise ``JsonFormattingError``.
    """

    def __init__(self, pretty_print: bool = True, indent: int = 2):
        self.pretty_print = pretty_print
        self.indent = indent

    def format(self, records: Sequence[Any], is_array_context: bool = True) -> str:
        """
        Format ``records`` as JSON text.

        With ``is_array_context`` the result is one array literal. Without
        it, each record is rendered on its own, separated by newlines, with
        no enclosing brackets.
        """
        if is_array_context:
            return self._dumps(list(records))
        return "\n".join(self._dumps(record) for record in records)

    def format_item(self, record: Any) -> str:
        """Format a single record."""
        return self._dumps(record)

    def _dumps(self, value: Any) -> str:
        try:
            if self.pretty_print and self.indent > 0:
                return json.dumps(
                    value,
                    indent=self.indent,
                    ensure_ascii=False,
                    allow_nan=False,
                    default=json_default,
                )
            return to_compact_json(value)
        except (TypeError, ValueError, RecursionError) as e:
            raise JsonFormattingError(f"Failed to format data as JSON: {e}") from e
