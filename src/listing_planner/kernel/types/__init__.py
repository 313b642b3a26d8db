"""Kernel types – Result monad."""
from listing_planner.kernel.types.result import Err, Ok, Result, capture

__all__ = ["Err", "Ok", "Result", "capture"]
