"""Infrastructure errors – a planned pipeline could not be run against storage.

Both carry the target ``collection`` and the driver ``operation``
(``aggregate``, ``explain`` ...) in ``detail`` so a failure can be traced
to one query without the driver's message leaving the logs.
"""

from __future__ import annotations

from typing import Any

from listing_planner.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    default_code = "infrastructure_error"


class StorageError(InfrastructureError):
    """Connection loss or a server-side failure while executing a pipeline (503)."""

    default_code = "storage_error"

    def __init__(
        self,
        message: str,
        *,
        collection: str | None = None,
        operation: str = "aggregate",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.collection = collection
        self.operation = operation
        self.detail.setdefault("operation", operation)
        if collection is not None:
            self.detail.setdefault("collection", collection)


class StorageTimeoutError(StorageError):
    """The pipeline outlived its deadline; the in-flight call was cancelled (504)."""

    default_code = "storage_timeout"

    def __init__(self, message: str, *, timeout_seconds: float | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.timeout_seconds = timeout_seconds
        if timeout_seconds is not None:
            self.detail.setdefault("timeout_seconds", timeout_seconds)


__all__ = ["InfrastructureError", "StorageError", "StorageTimeoutError"]
