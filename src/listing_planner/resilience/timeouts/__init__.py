"""Resilience – timeout policies."""
from listing_planner.resilience.timeouts.policy import TimeoutPolicy

__all__ = ["TimeoutPolicy"]
