"""FastAPI adapter – listing router, filter dependency, exception mapper, middleware.

Wiring::

    app = FastAPI()
    app.add_middleware(FastAPICorrelationIdMiddleware)
    FastAPIExceptionMapper().register(app)
    app.include_router(ListingRouter(service, settings), prefix="/api")
"""
from listing_planner.adapters.fastapi.deps import error_responses, listing_filter_dep
from listing_planner.adapters.fastapi.exception_mapper import FastAPIExceptionMapper
from listing_planner.adapters.fastapi.middleware import FastAPICorrelationIdMiddleware
from listing_planner.adapters.fastapi.routers import ListingRouter, run_until_disconnected

__all__ = [
    "FastAPICorrelationIdMiddleware",
    "FastAPIExceptionMapper",
    "ListingRouter",
    "error_responses",
    "listing_filter_dep",
    "run_until_disconnected",
]
