"""Tagged operation outcomes.

Setup code returns ``Ok | Err`` instead of raising so callers can separate
fatal setup errors from runtime failures without walking an exception
hierarchy. ``unwrap()`` converts back to exception style at the edge.

Usage:
    match resolve(raw):
        case Ok(value=config):
            ...
        case Err(error=error):
            report(error)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=BaseException)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed outcome carrying the error that explains why."""

    error: E

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        """Raise the carried error."""
        raise self.error


Result = Ok[T] | Err[E]
