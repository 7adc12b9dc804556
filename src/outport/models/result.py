"""
Result Model — success-or-failure values returned by writer operations.

Writers never raise across their public write/append/stream boundary.
Callers branch on ``result.success`` (or match on ``Ok`` / ``Err``).
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value (``None`` for void operations)."""

    value: T = None

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying the error that stopped the operation."""

    error: Exception

    @property
    def success(self) -> bool:
        return False


Result = Union[Ok[T], Err]
