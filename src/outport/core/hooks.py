"""
Optional callbacks invoked around write operations.

Every hook may be a plain function or a coroutine function. Asynchronous
code paths await them; ``write_sync`` refuses hooks that return awaitables.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from outport.errors import ValidationError
from outport.models.result import Result

T = TypeVar("T")

Records = Sequence[Any]

BeforeWriteHook = Callable[[Records], "Records | Awaitable[Records]"]
AfterWriteHook = Callable[[Records, int], "None | Awaitable[None]"]
ProgressHook = Callable[..., "None | Awaitable[None]"]  # (current, total=None)
ErrorHook = Callable[[Exception], "bool | None | Awaitable[bool | None]"]
CompleteHook = Callable[[Result[None], int], "None | Awaitable[None]"]


@dataclass
class LifecycleHooks:
    """Container for all lifecycle hooks."""

    before_write: BeforeWriteHook | None = None
    after_write: AfterWriteHook | None = None
    on_progress: ProgressHook | None = None
    on_error: ErrorHook | None = None  # Return value is advisory only
    on_complete: CompleteHook | None = None


async def maybe_await(value: T | Awaitable[T]) -> T:
    """Await ``value`` if it is awaitable, otherwise return it."""
    if inspect.isawaitable(value):
        return await value
    return value


def require_sync(value: T, hook_name: str) -> T:
    """Reject awaitable hook results on the synchronous path."""
    if inspect.isawaitable(value):
        if inspect.iscoroutine(value):
            value.close()
        raise ValidationError(f"Cannot use async {hook_name} hook with write_sync")
    return value
