"""Application planning – CollectionProfile strategy objects.

One profile per listing collection tells the generic planner where each
concept lives in that collection's documents (text-indexed fields, category
field, price paths, …).  Adding a collection means adding a profile, not a
new query builder.
"""
from __future__ import annotations

import dataclasses
from types import MappingProxyType
from typing import Mapping

from listing_planner.kernel.errors import InvalidParameterError


@dataclasses.dataclass(frozen=True)
class RangeField:
    """Document paths backing a named numeric range filter.

    A *paired* range stores its own bounds (``priceRange.min`` /
    ``priceRange.max``): the requested minimum applies to ``min_path`` and the
    requested maximum to ``max_path``.  A *scalar* range (``max_path`` is
    ``None``) applies both bounds to ``min_path``.
    """
    min_path: str
    max_path: str | None = None

    @property
    def is_scalar(self) -> bool:
        return self.max_path is None


@dataclasses.dataclass(frozen=True)
class CollectionProfile:
    """Per-collection field map consumed by the planner components.

    ``regex_fields``, ``equality_fields`` and ``set_fields`` map a query
    parameter to the document path it filters: substring, exact and any-of
    matching respectively.
    """

    name: str
    text_fields: tuple[str, ...]
    category_field: str = "category"
    category_param: str = "category"
    range_fields: Mapping[str, RangeField] = dataclasses.field(default_factory=dict)
    rating_field: str = "rating.average"
    rating_count_field: str | None = "rating.count"
    set_fields: Mapping[str, str] = dataclasses.field(default_factory=lambda: {"tags": "tags"})
    views_field: str = "views"
    featured_field: str | None = "featured"
    promoted_field: str | None = "promoted"
    location_field: str = "location"
    status_field: str = "status"
    visible_status: str = "active"
    default_sort: tuple[tuple[str, int], ...] = ()
    regex_fields: Mapping[str, str] = dataclasses.field(default_factory=dict)
    equality_fields: Mapping[str, str] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.text_fields:
            raise ValueError(f"profile '{self.name}' needs at least one text field")
        # read-only views keep shared profiles immutable
        object.__setattr__(self, "range_fields", MappingProxyType(dict(self.range_fields)))
        object.__setattr__(self, "regex_fields", MappingProxyType(dict(self.regex_fields)))
        object.__setattr__(self, "equality_fields", MappingProxyType(dict(self.equality_fields)))
        object.__setattr__(self, "set_fields", MappingProxyType(dict(self.set_fields)))

    @property
    def ranking_inputs(self) -> tuple[str, ...]:
        """Document fields read by the popularity blend."""
        fields = [self.rating_field, self.views_field]
        fields += [f for f in (self.featured_field, self.promoted_field) if f]
        return tuple(fields)


HOTELS = CollectionProfile(
    name="hotels",
    text_fields=("name", "description", "tags", "address.area"),
    range_fields={"price": RangeField("priceRange.min", "priceRange.max")},
    set_fields={"amenities": "amenities", "tags": "tags"},
    default_sort=(
        ("featured", -1),
        ("promoted", -1),
        ("rating.average", -1),
        ("createdAt", -1),
    ),
    regex_fields={"city": "address.city"},
    equality_fields={"featured": "featured"},
)

RESTAURANTS = CollectionProfile(
    name="restaurants",
    text_fields=("name", "description", "tags", "cuisine", "address.area"),
    category_field="cuisine",
    category_param="cuisine",
    range_fields={"mealCost": RangeField("avgMealCost")},
    set_fields={"amenities": "amenities", "tags": "tags"},
    default_sort=(
        ("featured", -1),
        ("promoted", -1),
        ("rating.average", -1),
        ("createdAt", -1),
    ),
    regex_fields={"city": "address.city"},
    equality_fields={"priceRange": "priceRange", "featured": "featured"},
)

ATTRACTIONS = CollectionProfile(
    name="attractions",
    text_fields=("name", "description", "category", "location.address"),
    range_fields={"price": RangeField("entryFee")},
    default_sort=(("createdAt", -1),),
    regex_fields={"city": "address.city"},
    equality_fields={
        "entryFeeType": "entryFeeType",
        "hasGuidedTour": "hasGuidedTour",
        "hasAudioGuide": "hasAudioGuide",
        "isWheelchairAccessible": "isWheelchairAccessible",
        "hasParking": "hasParking",
    },
)

EVENTS = CollectionProfile(
    name="events",
    text_fields=("title", "description", "category"),
    range_fields={"price": RangeField("ticketPrice")},
    promoted_field=None,
    default_sort=(("startDate", 1),),
    regex_fields={"venue": "venue.name"},
    equality_fields={"featured": "featured"},
)

SPORTS = CollectionProfile(
    name="sports",
    text_fields=("name", "description", "sport", "tags"),
    range_fields={"price": RangeField("pricing.hourly")},
    default_sort=(("name", 1),),
    regex_fields={"city": "address.city", "sport": "sport"},
    equality_fields={"featured": "featured"},
)

PROFILES: Mapping[str, CollectionProfile] = MappingProxyType(
    {p.name: p for p in (HOTELS, RESTAURANTS, ATTRACTIONS, EVENTS, SPORTS)}
)


def get_profile(name: str, profiles: Mapping[str, CollectionProfile] = PROFILES) -> CollectionProfile:
    """Look up a collection profile, rejecting unknown collections as bad input."""
    try:
        return profiles[name]
    except KeyError:
        raise InvalidParameterError(
            "collection", f"unknown collection (expected one of {sorted(profiles)})", value=name
        ) from None


__all__ = [
    "ATTRACTIONS",
    "EVENTS",
    "HOTELS",
    "PROFILES",
    "RESTAURANTS",
    "SPORTS",
    "CollectionProfile",
    "RangeField",
    "get_profile",
]
