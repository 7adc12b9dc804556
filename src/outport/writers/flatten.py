"""Flatten nested records into single-level CSV rows."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from outport.writers.json_format import to_compact_json


def flatten_object(record: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """
    Flatten nested mappings into ``parent_child`` keys.

    Nested mappings are expanded recursively. Lists and tuples, at any
    depth, become compact JSON strings rather than columns.

        >>> flatten_object({"user": {"name": "John", "address": {"city": "NYC"}}})
        {'user_name': 'John', 'user_address_city': 'NYC'}
    """
    flattened: dict[str, Any] = {}

    for key, value in record.items():
        new_key = f"{prefix}_{key}" if prefix else str(key)

        if value is None:
            flattened[new_key] = None
        elif isinstance(value, Mapping):
            flattened.update(flatten_object(value, new_key))
        elif isinstance(value, (list, tuple)):
            flattened[new_key] = to_compact_json(value)
        else:
            flattened[new_key] = value

    return flattened
