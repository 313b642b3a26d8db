"""
listing_planner – Listing query planner for document-store directories.

Import path convention::

    from listing_planner.application.planning import FilterRequest, ListingQueryPlanner
    from listing_planner.application.pagination import PageResult
    from listing_planner.adapters.mongodb import MongoPipelineExecutor
    from listing_planner.kernel.errors import InvalidParameterError
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
