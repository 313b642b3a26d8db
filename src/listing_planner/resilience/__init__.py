"""Resilience – timeouts for the storage round-trip."""
from listing_planner.resilience.timeouts import TimeoutPolicy

__all__ = ["TimeoutPolicy"]
