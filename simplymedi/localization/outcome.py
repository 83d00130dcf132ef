"""
Result type for best-effort remote calls.

A remote-dependent operation returns `Ok(value)` when the service answered
and `Fallback(value, reason)` when it degraded to a safe default. Callers
that only need the text use `.value`; tests can check which path was taken.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Fallback(Generic[T]):
    value: T
    reason: str

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Ok[T], Fallback[T]]
