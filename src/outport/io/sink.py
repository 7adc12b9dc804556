"""
File Sink — the byte sink writers persist through.

``FileSink`` is the protocol; ``LocalFileSink`` writes to the local file
system using builtin ``open`` for the blocking calls and ``aiofiles`` for
the asynchronous ones. Tests swap in their own implementation.
"""

from __future__ import annotations

import logging
import os
from typing import Protocol, runtime_checkable

import aiofiles
import aiofiles.os

from outport.errors import FileWriteError
from outport.models.result import Err, Ok, Result

logger = logging.getLogger(__name__)


@runtime_checkable
class FileSink(Protocol):
    """
    Protocol for the storage a writer targets.

    Write and append operations return a ``Result`` and never raise. The
    read operations raise ``OSError`` (or ``UnicodeDecodeError`` for
    content that is not UTF-8) and are only used by the JSON writer
    to load an existing array before appending to it.
    """

    def write_sync(self, path: str, content: str) -> Result[None]:
        """Overwrite ``path`` with ``content``."""
        ...

    async def write(self, path: str, content: str) -> Result[None]:
        """Overwrite ``path`` with ``content``."""
        ...

    def append_sync(self, path: str, content: str) -> Result[None]:
        """Append ``content`` to ``path``, creating it if needed."""
        ...

    async def append(self, path: str, content: str) -> Result[None]:
        """Append ``content`` to ``path``, creating it if needed."""
        ...

    def exists_sync(self, path: str) -> bool: ...

    async def exists(self, path: str) -> bool: ...

    def read_sync(self, path: str) -> str: ...

    async def read(self, path: str) -> str: ...


class LocalFileSink:
    """UTF-8 text files on the local disk, without newline translation."""

    encoding = "utf-8"

    def write_sync(self, path: str, content: str) -> Result[None]:
        return self._write_sync(path, content, "w", "Failed to write file")

    async def write(self, path: str, content: str) -> Result[None]:
        return await self._write(path, content, "w", "Failed to write file")

    def append_sync(self, path: str, content: str) -> Result[None]:
        return self._write_sync(path, content, "a", "Failed to append to file")

    async def append(self, path: str, content: str) -> Result[None]:
        return await self._write(path, content, "a", "Failed to append to file")

    def exists_sync(self, path: str) -> bool:
        return os.path.exists(path)

    async def exists(self, path: str) -> bool:
        return await aiofiles.os.path.exists(path)

    def read_sync(self, path: str) -> str:
        with open(path, encoding=self.encoding, newline="") as f:
            return f.read()

    async def read(self, path: str) -> str:
        async with aiofiles.open(path, encoding=self.encoding, newline="") as f:
            return await f.read()

    def _write_sync(self, path: str, content: str, mode: str, failure: str) -> Result[None]:
        try:
            with open(path, mode, encoding=self.encoding, newline="") as f:
                f.write(content)
        except (OSError, UnicodeError) as e:
            logger.error(f"{failure}: {path} ({e})")
            return Err(FileWriteError(f"{failure}: {path}", e))
        return Ok(None)

    async def _write(self, path: str, content: str, mode: str, failure: str) -> Result[None]:
        try:
            async with aiofiles.open(path, mode, encoding=self.encoding, newline="") as f:
                await f.write(content)
        except (OSError, UnicodeError) as e:
            logger.error(f"{failure}: {path} ({e})")
            return Err(FileWriteError(f"{failure}: {path}", e))
        return Ok(None)
