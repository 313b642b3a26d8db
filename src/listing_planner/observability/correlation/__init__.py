"""Observability – correlation context."""
from listing_planner.observability.correlation.context import (
    DEFAULT_HEADER,
    CorrelationContext,
    RequestContext,
    trace_id_from,
)

__all__ = ["DEFAULT_HEADER", "CorrelationContext", "RequestContext", "trace_id_from"]
