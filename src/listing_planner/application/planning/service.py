"""Application planning – ListingQueryService.

Thin use-case layer: resolve the collection profile, plan, run the pipeline
through a :class:`PipelineExecutor` port and fold the facet output into a
:class:`PageResult`.
"""
from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from listing_planner.application.pagination import PageResult
from listing_planner.application.planning.planner import ListingQueryPlanner
from listing_planner.application.planning.profiles import PROFILES, CollectionProfile, get_profile
from listing_planner.application.planning.request import FilterRequest
from listing_planner.application.planning.stages import Pipeline
from listing_planner.config.settings import PlannerSettings


@runtime_checkable
class PipelineExecutor(Protocol):
    """Port: run a planned pipeline against one collection."""

    async def execute(self, collection: str, pipeline: Pipeline) -> list[dict[str, Any]]: ...


class ListingQueryService:
    def __init__(
        self,
        executor: PipelineExecutor,
        settings: PlannerSettings | None = None,
        profiles: Mapping[str, CollectionProfile] = PROFILES,
    ) -> None:
        self._executor = executor
        self._settings = settings or PlannerSettings()
        self._profiles = profiles
        self._planners = {
            name: ListingQueryPlanner(profile, self._settings) for name, profile in profiles.items()
        }

    @property
    def settings(self) -> PlannerSettings:
        return self._settings

    @property
    def collections(self) -> tuple[str, ...]:
        return tuple(sorted(self._profiles))

    def planner(self, collection: str) -> ListingQueryPlanner:
        profile = get_profile(collection, self._profiles)
        return self._planners[profile.name]

    async def search(self, collection: str, request: FilterRequest) -> PageResult[dict[str, Any]]:
        """Plan and execute one listing query; planner and storage errors propagate."""
        planner = self.planner(collection)
        pipeline = planner.plan_or_raise(request)
        output = await self._executor.execute(collection, pipeline)
        return planner.to_page_result(output, request.page, request.page_size)

    async def search_params(
        self, collection: str, params: Mapping[str, str]
    ) -> PageResult[dict[str, Any]]:
        planner = self.planner(collection)
        request = FilterRequest.from_params(params, planner.profile, self._settings)
        return await self.search(collection, request)


__all__ = ["ListingQueryService", "PipelineExecutor"]
