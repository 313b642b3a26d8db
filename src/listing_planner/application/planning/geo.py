"""Application planning – GeoClause."""
from __future__ import annotations

from listing_planner.application.planning.predicate import PredicateDocument
from listing_planner.application.planning.profiles import CollectionProfile
from listing_planner.application.planning.request import GeoOrigin
from listing_planner.application.planning.stages import GeoNear
from listing_planner.kernel.errors import InvalidParameterError

METRES_PER_KM = 1000


class GeoClause:
    """Wrap a predicate in a ``$geoNear`` proximity selection.

    The predicate travels inside the stage as its ``query``; the planner
    must not emit a separate ``$match`` next to it.  Distances are accepted
    in kilometres and embedded in metres.
    """

    def __init__(self, profile: CollectionProfile | None = None) -> None:
        self._key = profile.location_field if profile is not None else None

    def apply(
        self,
        predicate: PredicateDocument,
        origin: GeoOrigin | None,
        max_distance_km: float,
    ) -> GeoNear | None:
        """Return the ``GeoNear`` stage, or ``None`` when no origin was given."""
        if origin is None:
            return None
        if max_distance_km <= 0:
            raise InvalidParameterError("distance", "must be > 0", value=max_distance_km)
        return GeoNear(
            origin=origin,
            max_distance=max_distance_km * METRES_PER_KM,
            predicate=predicate,
            key=self._key,
        )


__all__ = ["METRES_PER_KM", "GeoClause"]
