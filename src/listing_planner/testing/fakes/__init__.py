"""Testing fakes – in-memory doubles for the planner's ports."""
from listing_planner.testing.fakes.aggregation import (
    EARTH_RADIUS_M,
    InMemoryPipelineExecutor,
    haversine_m,
)

__all__ = ["EARTH_RADIUS_M", "InMemoryPipelineExecutor", "haversine_m"]
