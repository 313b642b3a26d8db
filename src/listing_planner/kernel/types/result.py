"""Result[T, E] – Ok and Err variants returned by planning calls.

``ListingQueryPlanner.plan`` hands callers a value instead of an exception::

    match planner.plan(request):
        case Ok(pipeline):
            ...
        case Err(InvalidParameterError() as exc):
            ...
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, Generic, NoReturn, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:  # noqa: ARG002
        return self.value

    def map(self, func: Callable[[T], U]) -> "Ok[U]":
        return Ok(func(self.value))

    def and_then(self, func: Callable[[T], "Result[U, Any]"]) -> "Result[U, Any]":
        """Chain a step that may itself fail, e.g. executing the planned pipeline."""
        return func(self.value)


@dataclasses.dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed variant; :meth:`unwrap` re-raises the carried error unchanged."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, func: Callable[[Any], Any]) -> "Err[E]":  # noqa: ARG002
        return self

    def and_then(self, func: Callable[[Any], Any]) -> "Err[E]":  # noqa: ARG002
        return self


type Result[T, E] = Ok[T] | Err[E]


def capture(
    func: Callable[..., T],
    /,
    *args: Any,
    errors: tuple[type[E], ...],
    **kwargs: Any,
) -> "Result[T, E]":
    """Call *func*; return ``Err`` for the listed *errors*, let anything else propagate."""
    try:
        return Ok(func(*args, **kwargs))
    except errors as exc:
        return Err(exc)


__all__ = ["Err", "Ok", "Result", "capture"]
