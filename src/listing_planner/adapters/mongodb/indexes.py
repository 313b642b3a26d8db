"""MongoDB adapter – ListingIndexManager."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from pymongo import ASCENDING, DESCENDING, GEOSPHERE, TEXT

from listing_planner.application.planning.profiles import PROFILES, CollectionProfile
from listing_planner.observability.logging import get_logger

_log = get_logger(__name__)

IndexKeys = list[tuple[str, Any]]


class ListingIndexManager:
    """Create the indexes the planned pipelines rely on.

    Per profile:

    - visibility compound (``status``, ``featured`` desc, ``promoted`` desc)
    - category, price paths, rating and set-filter fields, each paired with ``status``
    - regex filter paths (``address.city`` …) paired with ``status``
    - a ``2dsphere`` index on the location field, required by ``$geoNear``
    - one compound text index over the profile's text fields, required by ``$text``

    ``create_index`` is idempotent, so calling this on every startup is safe.
    """

    @classmethod
    def index_plan(cls, profile: CollectionProfile) -> list[tuple[str, IndexKeys]]:
        """Return ``(name, keys)`` pairs for *profile* without touching the server."""
        p = profile
        plan: list[tuple[str, IndexKeys]] = []

        visibility: IndexKeys = [(p.status_field, ASCENDING)]
        visibility += [(f, DESCENDING) for f in (p.featured_field, p.promoted_field) if f]
        plan.append((f"idx_{p.name}_visibility", visibility))

        plan.append((f"idx_{p.name}_category", [(p.category_field, ASCENDING), (p.status_field, ASCENDING)]))

        for name in sorted(p.range_fields):
            spec = p.range_fields[name]
            keys: IndexKeys = [(spec.min_path, ASCENDING)]
            if spec.max_path is not None:
                keys.append((spec.max_path, ASCENDING))
            plan.append((f"idx_{p.name}_{name}", keys))

        plan.append((f"idx_{p.name}_rating", [(p.rating_field, DESCENDING), (p.status_field, ASCENDING)]))

        for name in sorted(p.set_fields):
            plan.append((f"idx_{p.name}_{name}", [(p.set_fields[name], ASCENDING), (p.status_field, ASCENDING)]))

        for name in sorted(p.regex_fields):
            plan.append((f"idx_{p.name}_{name}", [(p.regex_fields[name], ASCENDING), (p.status_field, ASCENDING)]))

        plan.append((f"idx_{p.name}_location", [(p.location_field, GEOSPHERE)]))
        plan.append((f"idx_{p.name}_text", [(f, TEXT) for f in p.text_fields]))
        return plan

    @classmethod
    async def create_indexes(
        cls,
        database: Any,
        profiles: Mapping[str, CollectionProfile] | Iterable[CollectionProfile] = PROFILES,
    ) -> list[str]:
        """Create every index for every profile; returns the index names."""
        if isinstance(profiles, Mapping):
            profiles = profiles.values()
        created: list[str] = []
        for profile in profiles:
            collection = database[profile.name]
            plan = cls.index_plan(profile)
            for name, keys in plan:
                created.append(await collection.create_index(keys, name=name))
            _log.info("listing.indexes.created", collection=profile.name, count=len(plan))
        return created


__all__ = ["ListingIndexManager"]
