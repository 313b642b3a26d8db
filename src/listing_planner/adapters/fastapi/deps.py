"""FastAPI adapter – reusable dependency functions.

``listing_filter_dep``  query string → FilterRequest
``error_responses``     OpenAPI error documentation
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping

from fastapi import Request

from listing_planner.application.planning.profiles import PROFILES, CollectionProfile, get_profile
from listing_planner.application.planning.request import FilterRequest
from listing_planner.config.settings import PlannerSettings

# ---------------------------------------------------------------------------
# Filter dependency
# ---------------------------------------------------------------------------


def listing_filter_dep(
    settings: PlannerSettings | None = None,
    profiles: Mapping[str, CollectionProfile] = PROFILES,
) -> Callable[[str, Request], Awaitable[FilterRequest]]:
    """Return a dependency that normalises the query string of ``GET /{collection}``.

    Raises :class:`~listing_planner.kernel.errors.InvalidParameterError` for
    unknown collections and malformed filters; the exception mapper turns
    that into a 400.

    Usage::

        @router.get("/{collection}")
        async def listings(filters: FilterRequest = Depends(listing_filter_dep(settings))): ...
    """
    resolved = settings or PlannerSettings()

    async def filter_dep(collection: str, request: Request) -> FilterRequest:
        profile = get_profile(collection, profiles)
        return FilterRequest.from_params(_flatten(request.query_params), profile, resolved)

    return filter_dep


def _flatten(query_params: Any) -> dict[str, str]:
    """``?amenities=WiFi&amenities=Pool`` and ``?amenities=WiFi,Pool`` read the same."""
    return {key: ",".join(query_params.getlist(key)) for key in query_params.keys()}


# ---------------------------------------------------------------------------
# OpenAPI extra helpers
# ---------------------------------------------------------------------------

_ERROR_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "code": {"type": "string"},
        "message": {"type": "string"},
        "detail": {"type": "object"},
        "correlation_id": {"type": "string", "nullable": True},
    },
    "required": ["code", "message"],
}

_STATUS_ERRORS: dict[int, tuple[str, str]] = {
    400: ("invalid_parameter", "Invalid filter parameter"),
    500: ("invalid_pipeline", "Planner produced an invalid pipeline"),
    503: ("storage_error", "Storage unavailable"),
    504: ("storage_timeout", "Storage timeout"),
}


def error_responses(*codes: int) -> dict[int | str, dict[str, Any]]:
    """Build a ``responses`` dict documenting the listing error bodies."""
    result: dict[int | str, dict[str, Any]] = {}
    for code in codes:
        slug, description = _STATUS_ERRORS.get(code, ("error", "Error"))
        result[str(code)] = {
            "description": description,
            "content": {
                "application/json": {
                    "schema": _ERROR_SCHEMA,
                    "example": {
                        "code": slug,
                        "message": description,
                        "detail": {},
                        "correlation_id": "00000000-0000-0000-0000-000000000000",
                    },
                }
            },
        }
    return result


__all__ = ["error_responses", "listing_filter_dep"]
