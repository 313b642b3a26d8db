"""Application pagination – page results built from faceted aggregation output."""
from listing_planner.application.pagination.page import PageResult, to_page_result

__all__ = ["PageResult", "to_page_result"]
