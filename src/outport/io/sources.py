"""
Lazy record readers for JSON and JSON Lines files.

Used by the CLI to feed the streaming pipeline. JSON Lines input is read
line by line, so arbitrarily large files never sit in memory at once.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Mapping
from pathlib import Path
from typing import Any

import aiofiles

logger = logging.getLogger(__name__)

JSON_LINES_SUFFIXES = (".jsonl", ".ndjson")


def is_json_lines(path: Path) -> bool:
    """Check whether ``path`` should be read as one JSON document per line."""
    return path.suffix.lower() in JSON_LINES_SUFFIXES


async def read_records(path: Path) -> AsyncIterator[Mapping[str, Any]]:
    """
    Yield records from a JSON or JSON Lines file.

    A JSON file may hold an array of records or a single record. Blank
    lines in JSON Lines input are skipped. Malformed input raises
    ``ValueError`` naming the file (and line, for JSON Lines).
    """
    if is_json_lines(path):
        async for record in _read_json_lines(path):
            yield record
        return

    async with aiofiles.open(path, encoding="utf-8-sig") as f:
        content = await f.read()

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e

    items = parsed if isinstance(parsed, list) else [parsed]
    logger.debug(f"Loaded {len(items)} records from {path}")
    for item in items:
        yield _ensure_record(item, path)


async def _read_json_lines(path: Path) -> AsyncIterator[Mapping[str, Any]]:
    line_number = 0
    async with aiofiles.open(path, encoding="utf-8-sig") as f:
        async for line in f:
            line_number += 1
            if not line.strip():
                continue
            try:
                item = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON on line {line_number} of {path}: {e}") from e
            yield _ensure_record(item, path)


def _ensure_record(item: Any, path: Path) -> Mapping[str, Any]:
    if not isinstance(item, Mapping):
        raise ValueError(f"Expected JSON objects in {path}, got {type(item).__name__}")
    return item
