"""Application planning – FilterRequest and its parts.

A :class:`FilterRequest` is the normalised, validated form of the loosely
typed query string a listing endpoint receives.  It is built fresh for each
request, consumed once by the planner, and never mutated.
"""
from __future__ import annotations

import dataclasses
import math
import re
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from listing_planner.application.planning.profiles import CollectionProfile
from listing_planner.config.settings import PlannerSettings
from listing_planner.kernel.errors import InvalidParameterError

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")

MAX_RATING = 5.0


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @property
    def as_int(self) -> int:
        return 1 if self is SortDirection.ASC else -1


@dataclasses.dataclass(frozen=True)
class SortSpec:
    """Caller-chosen sort field (an alias or a dotted document path)."""
    field: str
    direction: SortDirection = SortDirection.ASC

    def __post_init__(self) -> None:
        if not _FIELD_NAME.match(self.field):
            raise InvalidParameterError("sortBy", "must be a plain field name", value=self.field)


@dataclasses.dataclass(frozen=True)
class NumericRange:
    """Inclusive ``[minimum, maximum]`` bound; either side may be open."""
    minimum: float | None = None
    maximum: float | None = None
    name: str = "range"

    def __post_init__(self) -> None:
        if self.minimum is None and self.maximum is None:
            raise InvalidParameterError(self.name, "at least one bound is required")
        if (
            self.minimum is not None
            and self.maximum is not None
            and self.minimum > self.maximum
        ):
            raise InvalidParameterError(
                self.name, "minimum exceeds maximum", value=(self.minimum, self.maximum)
            )


@dataclasses.dataclass(frozen=True)
class GeoOrigin:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidParameterError("lat", "must be within [-90, 90]", value=self.latitude)
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidParameterError("lng", "must be within [-180, 180]", value=self.longitude)

    def to_geojson(self) -> dict[str, Any]:
        # GeoJSON orders coordinates longitude first
        return {"type": "Point", "coordinates": [self.longitude, self.latitude]}


@dataclasses.dataclass(frozen=True)
class FilterRequest:
    """Validated listing filters for one request.

    Absent filters are ``None`` / empty and contribute nothing to the
    predicate.  ``ranges``, ``memberships``, ``matches`` and ``flags`` are keyed
    by query parameter name and stored as read-only mappings.  ``max_distance_km`` requires ``origin``; an origin without a
    distance is completed with the configured default by the planner.
    """

    text: str | None = None
    categories: frozenset[str] = frozenset()
    ranges: Mapping[str, NumericRange] = dataclasses.field(default_factory=dict)
    min_rating: float | None = None
    memberships: Mapping[str, frozenset[str]] = dataclasses.field(default_factory=dict)
    matches: Mapping[str, str] = dataclasses.field(default_factory=dict)
    flags: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    origin: GeoOrigin | None = None
    max_distance_km: float | None = None
    page: int = 1
    page_size: int = 12
    sort: SortSpec | None = None
    fields: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.text is not None and not self.text.strip():
            object.__setattr__(self, "text", None)
        for name in ("ranges", "matches", "flags"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
        object.__setattr__(
            self,
            "memberships",
            MappingProxyType({k: frozenset(v) for k, v in self.memberships.items() if v}),
        )
        if self.min_rating is not None and not 0.0 <= self.min_rating <= MAX_RATING:
            raise InvalidParameterError("rating", "must be within [0, 5]", value=self.min_rating)
        if self.max_distance_km is not None:
            if self.origin is None:
                raise InvalidParameterError(
                    "distance", "requires lat and lng", value=self.max_distance_km
                )
            if self.max_distance_km <= 0:
                raise InvalidParameterError("distance", "must be > 0", value=self.max_distance_km)
        if self.page < 1:
            raise InvalidParameterError("page", "must be >= 1", value=self.page)
        if self.page_size <= 0:
            raise InvalidParameterError("pageSize", "must be > 0", value=self.page_size)
        for name in self.fields:
            if not _FIELD_NAME.match(name):
                raise InvalidParameterError("fields", "must be plain field names", value=name)

    @property
    def has_text_query(self) -> bool:
        return self.text is not None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    # ------------------------------------------------------------------
    # Query-string normalisation
    # ------------------------------------------------------------------

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, str],
        profile: CollectionProfile,
        settings: PlannerSettings | None = None,
    ) -> "FilterRequest":
        """Build a request from raw query-string values.

        Recognised keys: ``search``/``q``, the profile's category parameter,
        ``min<Name>``/``max<Name>``/``<name>Range`` (``"a-b"``) for each
        profile range, ``rating``, the profile's set filters (``amenities``,
        ``tags``, comma separated), its regex and equality filters,
        ``lat``/``latitude``, ``lng``/``longitude``, ``distance``/``radius``, ``page``,
        ``limit``/``pageSize``, ``sortBy``, ``sortOrder`` and ``fields``.
        Unknown keys are ignored.
        """
        settings = settings or PlannerSettings()

        ranges: dict[str, NumericRange] = {}
        for name in profile.range_fields:
            bounds = _range_param(params, name)
            if bounds is not None:
                ranges[name] = bounds

        lat = _float_param(params, "lat", "latitude")
        lng = _float_param(params, "lng", "longitude")
        if (lat is None) != (lng is None):
            raise InvalidParameterError(
                "lat" if lat is None else "lng", "latitude and longitude must be supplied together"
            )
        origin = GeoOrigin(lat, lng) if lat is not None and lng is not None else None

        distance = _float_param(params, "distance", "radius")
        if origin is not None and distance is None:
            distance = float(settings.default_max_distance_km)

        page = _int_param(params, "page")
        page_size = _int_param(params, "limit", "pageSize")

        sort: SortSpec | None = None
        sort_by = _str_param(params, "sortBy")
        if sort_by is not None:
            raw_order = (_str_param(params, "sortOrder") or "asc").lower()
            try:
                direction = SortDirection(raw_order)
            except ValueError:
                raise InvalidParameterError(
                    "sortOrder", "must be 'asc' or 'desc'", value=raw_order
                ) from None
            sort = SortSpec(sort_by, direction)

        return cls(
            text=_str_param(params, "search", "q"),
            categories=_set_param(params, profile.category_param),
            ranges=ranges,
            min_rating=_float_param(params, "rating"),
            memberships={name: _set_param(params, name) for name in profile.set_fields},
            matches={
                name: value
                for name in profile.regex_fields
                if (value := _str_param(params, name)) is not None
            },
            flags={
                name: _flag_value(value)
                for name in profile.equality_fields
                if (value := _str_param(params, name)) is not None
            },
            origin=origin,
            max_distance_km=distance,
            page=page if page is not None else 1,
            page_size=page_size if page_size is not None else settings.default_page_size,
            sort=sort,
            fields=tuple(sorted(_set_param(params, "fields"))),
        )


# ---------------------------------------------------------------------------
# Raw parameter helpers
# ---------------------------------------------------------------------------


def _str_param(params: Mapping[str, str], *names: str) -> str | None:
    for name in names:
        raw = params.get(name)
        if raw is not None and str(raw).strip():
            return str(raw).strip()
    return None


def _float_param(params: Mapping[str, str], *names: str) -> float | None:
    raw = _str_param(params, *names)
    if raw is None:
        return None
    return _parse_float(raw, names[0])


def _parse_float(raw: str, name: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise InvalidParameterError(name, "must be a number", value=raw) from None
    if not math.isfinite(value):
        raise InvalidParameterError(name, "must be finite", value=raw)
    return value


def _int_param(params: Mapping[str, str], *names: str) -> int | None:
    raw = _str_param(params, *names)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        raise InvalidParameterError(names[-1], "must be an integer", value=raw) from None


def _set_param(params: Mapping[str, str], name: str) -> frozenset[str]:
    raw = _str_param(params, name)
    if raw is None:
        return frozenset()
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


def _range_param(params: Mapping[str, str], name: str) -> NumericRange | None:
    suffix = name[0].upper() + name[1:]
    low = _float_param(params, f"min{suffix}")
    high = _float_param(params, f"max{suffix}")
    combined = _str_param(params, f"{name}Range")
    if combined is not None and low is None and high is None:
        low_raw, sep, high_raw = combined.partition("-")
        if not sep:
            raise InvalidParameterError(f"{name}Range", "expected 'min-max'", value=combined)
        low = _parse_float(low_raw, f"{name}Range") if low_raw.strip() else None
        high = _parse_float(high_raw, f"{name}Range") if high_raw.strip() else None
    if low is None and high is None:
        return None
    return NumericRange(low, high, name=name)


def _flag_value(raw: str) -> Any:
    lowered = raw.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return raw


__all__ = ["FilterRequest", "GeoOrigin", "NumericRange", "SortDirection", "SortSpec"]
