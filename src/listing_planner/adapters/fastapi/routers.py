"""FastAPI adapter – ListingRouter."""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Iterable, TypeVar

from bson import ObjectId
from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder

from listing_planner.adapters.fastapi.deps import error_responses, listing_filter_dep
from listing_planner.application.planning.request import FilterRequest
from listing_planner.application.planning.service import ListingQueryService
from listing_planner.config.settings import PlannerSettings
from listing_planner.observability.logging import get_logger

_log = get_logger(__name__)

T = TypeVar("T")

DISCONNECT_POLL_SECONDS = 0.1


async def run_until_disconnected(request: Request, awaitable: Awaitable[T]) -> T:
    """Await *awaitable*, cancelling it if the client goes away first.

    The cancellation reaches the storage call, so an abandoned request does
    not keep an aggregate running.  ``asyncio.CancelledError`` is re-raised
    to the server.
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                _log.info("listing.request.disconnected", path=request.url.path)
                task.cancel()
                return await task
    except asyncio.CancelledError:
        task.cancel()
        raise


def ListingRouter(
    service: ListingQueryService,
    settings: PlannerSettings | None = None,
    collections: Iterable[str] | None = None,
    tags: list[str] | None = None,
) -> APIRouter:
    """Return a router serving ``GET /{collection}`` for the given collections.

    Parameters
    ----------
    service:
        The query service that plans and executes the search.
    settings:
        Settings used to normalise query strings (defaults, page-size cap).
    collections:
        Collections exposed by this router; defaults to every collection
        the service knows.
    tags:
        OpenAPI tags for the generated route.
    """
    allowed = frozenset(collections) if collections is not None else frozenset(service.collections)
    router = APIRouter(tags=tags or ["listings"])
    profiles = {name: service.planner(name).profile for name in allowed}
    filter_dep = listing_filter_dep(settings or service.settings, profiles)

    @router.get("/{collection}", responses=error_responses(400, 500, 503, 504))
    async def list_listings(
        collection: str,
        request: Request,
        filters: FilterRequest = Depends(filter_dep),
    ) -> Any:
        """Filtered, ranked and paginated listings of one collection."""
        page = await run_until_disconnected(request, service.search(collection, filters))
        return jsonable_encoder(page.to_dict(), custom_encoder={ObjectId: str})

    return router


__all__ = ["ListingRouter", "run_until_disconnected"]
