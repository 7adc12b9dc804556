"""Shared fixtures: an in-memory file sink for writer tests."""

import pytest

from outport.errors import FileWriteError
from outport.models.result import Err, Ok


class MemorySink:
    """
    FileSink keeping files in a dict.

    Operations named in ``fail_on`` return ``Err(FileWriteError)``;
    ``fail_after`` lets that many write/append calls succeed first.
    """

    def __init__(self, fail_on=(), fail_after=0):
        self.files: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_on = set(fail_on)
        self.fail_after = fail_after

    def _should_fail(self, op: str) -> bool:
        if op not in self.fail_on:
            return False
        if self.fail_after > 0:
            self.fail_after -= 1
            return False
        return True

    def write_sync(self, path, content):
        self.calls.append(("write", path))
        if self._should_fail("write"):
            return Err(FileWriteError(f"Failed to write file: {path}"))
        self.files[path] = content
        return Ok(None)

    async def write(self, path, content):
        return self.write_sync(path, content)

    def append_sync(self, path, content):
        self.calls.append(("append", path))
        if self._should_fail("append"):
            return Err(FileWriteError(f"Failed to append to file: {path}"))
        self.files[path] = self.files.get(path, "") + content
        return Ok(None)

    async def append(self, path, content):
        return self.append_sync(path, content)

    def exists_sync(self, path):
        return path in self.files

    async def exists(self, path):
        return self.exists_sync(path)

    def read_sync(self, path):
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    async def read(self, path):
        return self.read_sync(path)


@pytest.fixture
def memory_sink():
    return MemorySink()


@pytest.fixture
def make_sink():
    return MemorySink
