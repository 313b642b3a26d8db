"""Application planning – ListingQueryPlanner.

Orchestrates one planning call::

    FilterRequest
      → PredicateBuilder           (predicate)
      → GeoClause | Match          (single selection stage)
      → Project                    (only when sparse fields are requested)
      → RankingStage + derived fields
      → Sort
      → PipelineOptimizer          (precedence order, selection checks)
      → FacetedPager               (page + total in one $facet)

Any failure aborts the plan; no partial pipeline is ever returned.
"""
from __future__ import annotations

from typing import Any, Mapping, Sequence

from listing_planner.application.pagination import PageResult, to_page_result
from listing_planner.application.planning.geo import METRES_PER_KM, GeoClause
from listing_planner.application.planning.optimizer import PipelineOptimizer
from listing_planner.application.planning.pager import FacetedPager
from listing_planner.application.planning.predicate import PredicateBuilder
from listing_planner.application.planning.profiles import CollectionProfile, RangeField
from listing_planner.application.planning.ranking import (
    POPULARITY_FIELD,
    RELEVANCE_FIELD,
    RankingStage,
    RankingWeights,
)
from listing_planner.application.planning.request import FilterRequest
from listing_planner.application.planning.stages import (
    DISTANCE_FIELD,
    AddComputedFields,
    Match,
    Pipeline,
    PipelineStage,
    Project,
    Sort,
)
from listing_planner.config.settings import PlannerSettings
from listing_planner.kernel.errors import InvalidParameterError, InvalidPipelineError, PlannerError
from listing_planner.kernel.types import Result, capture
from listing_planner.observability.logging import get_logger

_log = get_logger(__name__)

DISTANCE_KM_FIELD = "distanceKm"
REVIEW_COUNT_FIELD = "reviewCount"
AVERAGE_PRICE_FIELD = "averagePrice"
TIE_BREAKER = ("_id", 1)


class ListingQueryPlanner:
    """Compile a :class:`FilterRequest` into an executable :class:`Pipeline`.

    One planner serves one collection profile.  It holds no per-request
    state, so a single instance can be shared across concurrent requests.
    """

    def __init__(
        self,
        profile: CollectionProfile,
        settings: PlannerSettings | None = None,
        *,
        optimizer: PipelineOptimizer | None = None,
        pager: FacetedPager | None = None,
    ) -> None:
        self._profile = profile
        self._settings = settings or PlannerSettings()
        self._predicates = PredicateBuilder(profile)
        self._geo = GeoClause(profile)
        self._ranking = RankingStage(profile, RankingWeights.from_settings(self._settings))
        self._optimizer = optimizer or PipelineOptimizer()
        self._pager = pager or FacetedPager()

    @property
    def profile(self) -> CollectionProfile:
        return self._profile

    @property
    def settings(self) -> PlannerSettings:
        return self._settings

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def plan(self, request: FilterRequest) -> Result[Pipeline, PlannerError]:
        """Return ``Ok(pipeline)`` or ``Err(error)``; never raises planner errors."""
        return capture(
            self.plan_or_raise, request, errors=(InvalidParameterError, InvalidPipelineError)
        )

    def plan_or_raise(self, request: FilterRequest) -> Pipeline:
        try:
            pipeline = self._assemble(request)
        except InvalidParameterError as exc:
            _log.info(
                "listing.plan.rejected",
                collection=self._profile.name,
                code=exc.code,
                parameter=exc.parameter,
            )
            raise
        except InvalidPipelineError as exc:
            _log.error(
                "listing.plan.invalid_pipeline",
                collection=self._profile.name,
                stages=exc.stages,
            )
            raise
        _log.debug(
            "listing.plan.built",
            collection=self._profile.name,
            stages=[kind.value for kind in pipeline.kinds],
            geo=request.origin is not None,
            text=request.has_text_query,
        )
        return pipeline

    def to_page_result(
        self,
        facet_output: Sequence[Mapping[str, Any]],
        page: int,
        page_size: int,
    ) -> PageResult[dict[str, Any]]:
        return to_page_result(facet_output, page, page_size)

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def _assemble(self, request: FilterRequest) -> Pipeline:
        self._check_limits(request)

        predicate = self._predicates.build(request)
        distance_km = request.max_distance_km or float(self._settings.default_max_distance_km)
        geo = self._geo.apply(predicate, request.origin, distance_km)
        has_geo = geo is not None
        has_text = predicate.has_text_search

        sort = Sort(self._sort_keys(request, has_text=has_text, has_geo=has_geo))

        stages: list[PipelineStage] = [geo if geo is not None else Match(predicate)]
        if request.fields:
            stages.append(Project(self._projection(request, sort, has_geo=has_geo)))
        stages.append(self._ranking.compute(has_text))
        if has_text and POPULARITY_FIELD in sort.fields:
            stages.append(self._ranking.compute(False))
        derived = self._derived_fields(has_geo=has_geo)
        if derived:
            stages.append(AddComputedFields(derived))
        stages.append(sort)

        ordered = self._optimizer.optimize(stages)
        return self._pager.paginate(ordered, request.page, request.page_size)

    def _check_limits(self, request: FilterRequest) -> None:
        if request.page_size > self._settings.max_page_size:
            raise InvalidParameterError(
                "pageSize",
                f"must be <= {self._settings.max_page_size}",
                value=request.page_size,
            )

    def _sort_keys(
        self, request: FilterRequest, *, has_text: bool, has_geo: bool
    ) -> tuple[tuple[str, int], ...]:
        keys: list[tuple[str, int]] = []
        if request.sort is not None:
            field = self._resolve_sort_field(request.sort.field, has_text=has_text, has_geo=has_geo)
            keys.append((field, request.sort.direction.as_int))
        elif has_geo:
            keys.append((DISTANCE_FIELD, 1))
        elif has_text:
            keys.append((RELEVANCE_FIELD, -1))
        else:
            keys.append((POPULARITY_FIELD, -1))
            keys.extend(self._profile.default_sort)
        keys.append(TIE_BREAKER)

        seen: set[str] = set()
        unique: list[tuple[str, int]] = []
        for name, direction in keys:
            if name not in seen:
                seen.add(name)
                unique.append((name, direction))
        return tuple(unique)

    def _resolve_sort_field(self, field: str, *, has_text: bool, has_geo: bool) -> str:
        p = self._profile
        if field in ("relevance", RELEVANCE_FIELD):
            if not has_text:
                raise InvalidParameterError("sortBy", "relevance needs a search term", value=field)
            return RELEVANCE_FIELD
        if field == DISTANCE_FIELD:
            if not has_geo:
                raise InvalidParameterError("sortBy", "distance needs lat and lng", value=field)
            return DISTANCE_FIELD
        if field == "rating":
            return p.rating_field
        if field == "views":
            return p.views_field
        if field == "price" and "price" in p.range_fields:
            return p.range_fields["price"].min_path
        return field

    def _projection(self, request: FilterRequest, sort: Sort, *, has_geo: bool) -> tuple[str, ...]:
        p = self._profile
        computed = {POPULARITY_FIELD, RELEVANCE_FIELD, DISTANCE_FIELD}
        keep = set(request.fields) | set(p.ranking_inputs)
        keep |= {name for name in sort.fields if name not in computed and name != "_id"}
        if p.rating_count_field:
            keep.add(p.rating_count_field)
        price = self._paired_price()
        if price is not None:
            keep |= {price.min_path, price.max_path or price.min_path}
        if has_geo:
            keep.add(DISTANCE_FIELD)
        # a parent path already covers its children
        return tuple(
            sorted(
                name for name in keep
                if not any(name.startswith(other + ".") for other in keep if other != name)
            )
        )

    def _derived_fields(self, *, has_geo: bool) -> dict[str, Any]:
        derived: dict[str, Any] = {}
        if has_geo:
            derived[DISTANCE_KM_FIELD] = {
                "$round": [{"$divide": [f"${DISTANCE_FIELD}", METRES_PER_KM]}, 2]
            }
        if self._profile.rating_count_field:
            derived[REVIEW_COUNT_FIELD] = {"$ifNull": [f"${self._profile.rating_count_field}", 0]}
        price = self._paired_price()
        if price is not None:
            derived[AVERAGE_PRICE_FIELD] = {"$avg": [f"${price.min_path}", f"${price.max_path}"]}
        return derived

    def _paired_price(self) -> RangeField | None:
        spec = self._profile.range_fields.get("price")
        return None if spec is None or spec.is_scalar else spec


__all__ = [
    "AVERAGE_PRICE_FIELD",
    "DISTANCE_KM_FIELD",
    "REVIEW_COUNT_FIELD",
    "ListingQueryPlanner",
]
