"""Per-request correlation for listing searches.

A search request carries a caller-chosen correlation id (echoed on the
response and bound into every log line) and, when the caller participates
in W3C tracing, the 32-hex ``trace-id`` taken from ``traceparent``.
"""
from __future__ import annotations

import dataclasses
import re
from contextvars import ContextVar, Token
from typing import Mapping
from uuid import uuid4

DEFAULT_HEADER = "X-Correlation-ID"
_FALLBACK_HEADER = "x-request-id"
_TRACEPARENT = re.compile(r"^[0-9a-f]{2}-(?P<trace_id>[0-9a-f]{32})-[0-9a-f]{16}-[0-9a-f]{2}")
_NULL_TRACE = "0" * 32


def trace_id_from(traceparent: str | None) -> str | None:
    """Return the trace-id of a well-formed ``traceparent`` or ``None``.

    The all-zero trace-id is invalid per W3C Trace Context and is dropped.
    """
    if not traceparent:
        return None
    match = _TRACEPARENT.match(traceparent.strip().lower())
    if match is None or match["trace_id"] == _NULL_TRACE:
        return None
    return match["trace_id"]


@dataclasses.dataclass(frozen=True)
class RequestContext:
    correlation_id: str
    trace_id: str | None = None

    @classmethod
    def new(cls) -> "RequestContext":
        return cls(correlation_id=str(uuid4()))

    @classmethod
    def from_headers(
        cls, headers: Mapping[str, str], header_name: str = DEFAULT_HEADER
    ) -> "RequestContext":
        """Build a context from request headers (names compared case-insensitively).

        The correlation id is read from *header_name*, then ``X-Request-ID``;
        a UUID4 is generated when neither is present.
        """
        lowered = {k.lower(): v for k, v in headers.items()}
        correlation_id = (
            lowered.get(header_name.lower()) or lowered.get(_FALLBACK_HEADER) or str(uuid4())
        )
        return cls(correlation_id=correlation_id, trace_id=trace_id_from(lowered.get("traceparent")))

    def log_fields(self) -> dict[str, str]:
        fields = {"correlation_id": self.correlation_id}
        if self.trace_id is not None:
            fields["trace_id"] = self.trace_id
        return fields


_current: ContextVar[RequestContext | None] = ContextVar("listing_request_context", default=None)


class CorrelationContext:
    """Access to the :class:`RequestContext` of the running request."""

    @staticmethod
    def set(ctx: RequestContext) -> Token[RequestContext | None]:
        return _current.set(ctx)

    @staticmethod
    def reset(token: Token[RequestContext | None]) -> None:
        """Restore whatever context was active before the matching :meth:`set`."""
        _current.reset(token)

    @staticmethod
    def get() -> RequestContext | None:
        return _current.get()

    @staticmethod
    def get_or_new() -> RequestContext:
        ctx = _current.get()
        if ctx is None:
            ctx = RequestContext.new()
            _current.set(ctx)
        return ctx

    @staticmethod
    def clear() -> None:
        _current.set(None)

    @staticmethod
    def set_from_headers(
        headers: Mapping[str, str], header_name: str = DEFAULT_HEADER
    ) -> RequestContext:
        ctx = RequestContext.from_headers(headers, header_name)
        _current.set(ctx)
        return ctx


__all__ = ["DEFAULT_HEADER", "CorrelationContext", "RequestContext", "trace_id_from"]
