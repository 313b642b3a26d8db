"""Resilience – TimeoutPolicy for storage round-trips."""
from __future__ import annotations

import asyncio
import dataclasses
from typing import Awaitable, Callable, TypeVar

from listing_planner.kernel.errors import StorageTimeoutError

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class TimeoutPolicy:
    """Deadline for one storage call, e.g. ``TimeoutPolicy(10.0)`` from
    ``LISTING_QUERY_TIMEOUT_SECONDS``.

    Expiry cancels the call and raises :class:`StorageTimeoutError` naming
    the collection and operation.  Timeouts are not retried, and the
    caller's own cancellation passes through.
    """

    timeout_seconds: float

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")

    async def execute(
        self,
        func: Callable[[], Awaitable[T]],
        *,
        collection: str | None = None,
        operation: str = "aggregate",
    ) -> T:
        try:
            return await asyncio.wait_for(func(), timeout=self.timeout_seconds)
        except TimeoutError as exc:
            where = f" on '{collection}'" if collection else ""
            raise StorageTimeoutError(
                f"{operation}{where} exceeded {self.timeout_seconds}s",
                collection=collection,
                operation=operation,
                timeout_seconds=self.timeout_seconds,
                cause=exc,
            ) from exc


__all__ = ["TimeoutPolicy"]
