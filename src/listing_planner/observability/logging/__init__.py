"""Observability – structured logging helpers."""
from listing_planner.observability.logging.factory import JsonLoggerFactory
from listing_planner.observability.logging.processors import CorrelationProcessor, get_logger

__all__ = ["CorrelationProcessor", "JsonLoggerFactory", "get_logger"]
