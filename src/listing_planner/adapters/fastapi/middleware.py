"""FastAPI adapter – FastAPICorrelationIdMiddleware."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from listing_planner.observability.correlation import (
    DEFAULT_HEADER,
    CorrelationContext,
    RequestContext,
)

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send


class FastAPICorrelationIdMiddleware:
    """Tag each search request with a correlation id and echo it on the response.

    The id is read from *header_name* (``X-Correlation-ID`` by default), then
    ``X-Request-ID``, else generated.  It is bound into structlog's
    contextvars for the duration of the request, alongside the W3C trace-id
    when a valid ``traceparent`` is sent.
    """

    def __init__(self, app: "ASGIApp", header_name: str = DEFAULT_HEADER) -> None:
        self.app = app
        self._header_name = header_name
        self._response_header = header_name.lower().encode("latin-1")

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = {k.decode("latin-1"): v.decode("latin-1") for k, v in scope.get("headers", [])}
        ctx = RequestContext.from_headers(headers, self._header_name)
        token = CorrelationContext.set(ctx)
        bound = ctx.log_fields()
        structlog.contextvars.bind_contextvars(**bound)
        echoed = (self._response_header, ctx.correlation_id.encode("latin-1"))

        async def send_with_header(message: Any) -> None:
            if message["type"] == "http.response.start":
                message = {**message, "headers": [*message.get("headers", []), echoed]}
            await send(message)

        try:
            await self.app(scope, receive, send_with_header)
        finally:
            structlog.contextvars.unbind_contextvars(*bound)
            CorrelationContext.reset(token)


__all__ = ["FastAPICorrelationIdMiddleware"]
