"""Observability – correlation and structured logging."""

from listing_planner.observability.correlation import CorrelationContext, RequestContext
from listing_planner.observability.logging import CorrelationProcessor, JsonLoggerFactory, get_logger

__all__ = [
    "CorrelationContext",
    "CorrelationProcessor",
    "JsonLoggerFactory",
    "RequestContext",
    "get_logger",
]
