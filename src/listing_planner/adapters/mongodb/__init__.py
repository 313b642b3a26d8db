"""MongoDB adapter – pipeline executor, index bootstrap, sample data.

Backed by ``motor`` (async driver) and ``pymongo`` (index constants and
error types).
"""

from listing_planner.adapters.mongodb.executor import MongoPipelineExecutor
from listing_planner.adapters.mongodb.indexes import ListingIndexManager
from listing_planner.adapters.mongodb.seeding import SAMPLE_DATA, SAMPLE_HOTELS, ListingSeeder

__all__ = [
    "SAMPLE_DATA",
    "SAMPLE_HOTELS",
    "ListingIndexManager",
    "ListingSeeder",
    "MongoPipelineExecutor",
]
