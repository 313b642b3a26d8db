"""FastAPI adapter – FastAPIExceptionMapper."""
from __future__ import annotations

from typing import Any, Callable

from fastapi.responses import JSONResponse

from listing_planner.kernel.errors import (
    BaseError,
    InvalidParameterError,
    InvalidPipelineError,
    StorageError,
    StorageTimeoutError,
)
from listing_planner.observability.correlation import CorrelationContext
from listing_planner.observability.logging import get_logger

_log = get_logger(__name__)


class FastAPIExceptionMapper:
    """Register listing error → HTTP status-code mappings on a FastAPI app.

    Error body schema::

        {"code": "invalid_parameter", "message": "...", "detail": {...}, "correlation_id": "..."}

    Mappings
    --------
    ``InvalidParameterError`` → 400
    ``InvalidPipelineError``  → 500
    ``StorageTimeoutError``   → 504
    ``StorageError``          → 503
    """

    def __init__(self) -> None:
        # more-specific subtypes first
        self._map: list[tuple[type[BaseError], int]] = [
            (InvalidParameterError, 400),
            (InvalidPipelineError, 500),
            (StorageTimeoutError, 504),
            (StorageError, 503),
        ]

    @property
    def mappings(self) -> list[tuple[type[BaseError], int]]:
        return list(self._map)

    def status_for(self, exc: BaseException) -> int | None:
        for exc_type, status in self._map:
            if isinstance(exc, exc_type):
                return status
        return None

    def register(self, app: Any) -> None:
        """Register all error handlers on a ``FastAPI`` or ``Starlette`` app."""
        for exc_type, status in self._map:
            app.add_exception_handler(exc_type, self._make_handler(status))

    @staticmethod
    def _make_handler(code: int) -> Callable[[Any, Any], Any]:
        def handler(request: Any, exc: Any) -> JSONResponse:  # noqa: ARG001
            ctx = CorrelationContext.get()
            if isinstance(exc, BaseError):
                # the driver's exception text stays in the logs
                body = exc.to_dict(include_cause=False)
                fields = exc.log_fields()
            else:
                body = {"code": "error", "message": str(exc)}
                fields = {"code": "error"}
            body["correlation_id"] = ctx.correlation_id if ctx is not None else None
            if code >= 500:
                _log.error("listing.request.failed", status=code, **fields)
            return JSONResponse(status_code=code, content=body)

        return handler


__all__ = ["FastAPIExceptionMapper"]
