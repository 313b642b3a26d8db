"""MongoDB adapter – ListingSeeder (opt-in sample data)."""

from __future__ import annotations

import copy
from datetime import UTC, datetime
from typing import Any, Mapping, Sequence

from listing_planner.observability.logging import get_logger

_log = get_logger(__name__)


def _hotel(
    name: str,
    category: str,
    area: str,
    coordinates: tuple[float, float],
    price: tuple[int, int],
    amenities: list[str],
    tags: list[str],
    *,
    featured: bool,
    promoted: bool,
    rating: float,
    reviews: int,
    views: int,
    description: str,
) -> dict[str, Any]:
    return {
        "name": name,
        "description": description,
        "category": category,
        "location": {"type": "Point", "coordinates": list(coordinates)},
        "address": {"area": area, "city": "Kolkata", "state": "West Bengal"},
        "priceRange": {"min": price[0], "max": price[1], "currency": "INR"},
        "amenities": amenities,
        "tags": tags,
        "status": "active",
        "featured": featured,
        "promoted": promoted,
        "rating": {"average": rating, "count": reviews},
        "views": views,
    }


SAMPLE_HOTELS: tuple[dict[str, Any], ...] = (
    _hotel(
        "The Astor Kolkata", "Luxury", "Park Street", (88.3639, 22.5726), (8000, 25000),
        ["WiFi", "Pool", "Gym", "Restaurant", "Bar", "Spa", "Room Service", "Concierge"],
        ["Luxury", "Heritage", "Business", "Central Location"],
        featured=True, promoted=False, rating=4.5, reviews=1250, views=5000,
        description="A luxury heritage hotel in the heart of Kolkata with world-class service.",
    ),
    _hotel(
        "ITC Royal Bengal", "Luxury", "Jawaharlal Nehru Road", (88.3512, 22.5535), (12000, 35000),
        ["WiFi", "Pool", "Gym", "Restaurant", "Bar", "Spa", "Room Service", "Business Center"],
        ["Luxury", "Colonial", "Business"],
        featured=True, promoted=True, rating=4.7, reviews=2100, views=8000,
        description="An iconic luxury hotel known for its colonial architecture.",
    ),
    _hotel(
        "Hyatt Regency Kolkata", "Luxury", "Salt Lake City", (88.4172, 22.5867), (9000, 22000),
        ["WiFi", "Pool", "Gym", "Restaurant", "Bar", "Spa", "Business Center"],
        ["Luxury", "Modern", "City Views"],
        featured=False, promoted=True, rating=4.3, reviews=950, views=3200,
        description="Modern luxury hotel with city views and contemporary design.",
    ),
    _hotel(
        "Budget Inn Kolkata", "Budget", "Ballygunge", (88.3657, 22.5280), (1500, 3500),
        ["WiFi", "Restaurant", "Room Service", "Parking"],
        ["Budget", "Value", "Family"],
        featured=False, promoted=False, rating=3.8, reviews=320, views=1200,
        description="Clean and affordable rooms for budget travellers.",
    ),
    _hotel(
        "City Center Hotel", "Mid-range", "Park Street", (88.3520, 22.5530), (3000, 7000),
        ["WiFi", "Restaurant", "Bar", "Room Service", "Concierge"],
        ["Mid-range", "Central Location"],
        featured=False, promoted=False, rating=4.0, reviews=180, views=800,
        description="Mid-range hotel offering a comfortable stay in the heart of the city.",
    ),
)

SAMPLE_DATA: Mapping[str, Sequence[dict[str, Any]]] = {"hotels": SAMPLE_HOTELS}


class ListingSeeder:
    """Insert sample listings into empty collections.

    Seeding is an explicit startup or fixture step; the query path never
    writes.  Existing data is left untouched.
    """

    def __init__(self, database: Any, samples: Mapping[str, Sequence[dict[str, Any]]] = SAMPLE_DATA) -> None:
        self._db = database
        self._samples = samples

    async def seed_if_empty(self, collection: str, documents: Sequence[dict[str, Any]] | None = None) -> int:
        """Insert *documents* (or the built-in samples) when *collection* is empty.

        Returns the number of inserted documents, 0 if the collection already
        had data or there is nothing to insert.
        """
        docs = documents if documents is not None else self._samples.get(collection, ())
        if not docs:
            return 0
        col = self._db[collection]
        if await col.count_documents({}, limit=1):
            return 0
        now = datetime.now(UTC)
        # deep copies so the module-level samples never gain an _id
        payload = [{"createdAt": now, **copy.deepcopy(doc)} for doc in docs]
        result = await col.insert_many(payload)
        _log.info("listing.seed.inserted", collection=collection, count=len(result.inserted_ids))
        return len(result.inserted_ids)

    async def seed_all(self) -> dict[str, int]:
        return {name: await self.seed_if_empty(name) for name in self._samples}


__all__ = ["SAMPLE_DATA", "SAMPLE_HOTELS", "ListingSeeder"]
