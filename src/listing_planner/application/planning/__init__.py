"""Application planning – compile listing filters into aggregation pipelines."""
from listing_planner.application.planning.geo import METRES_PER_KM, GeoClause
from listing_planner.application.planning.optimizer import PipelineOptimizer
from listing_planner.application.planning.pager import COUNT_BRANCH, DATA_BRANCH, FacetedPager
from listing_planner.application.planning.planner import (
    AVERAGE_PRICE_FIELD,
    DISTANCE_KM_FIELD,
    REVIEW_COUNT_FIELD,
    ListingQueryPlanner,
)
from listing_planner.application.planning.predicate import (
    Equality,
    LeafKind,
    PredicateBuilder,
    PredicateDocument,
    PredicateLeaf,
    Range,
    RegexSubstring,
    SetMembership,
    TextSearch,
)
from listing_planner.application.planning.profiles import (
    ATTRACTIONS,
    EVENTS,
    HOTELS,
    PROFILES,
    RESTAURANTS,
    SPORTS,
    CollectionProfile,
    RangeField,
    get_profile,
)
from listing_planner.application.planning.ranking import (
    POPULARITY_FIELD,
    RELEVANCE_FIELD,
    RankingStage,
    RankingWeights,
)
from listing_planner.application.planning.request import (
    FilterRequest,
    GeoOrigin,
    NumericRange,
    SortDirection,
    SortSpec,
)
from listing_planner.application.planning.service import ListingQueryService, PipelineExecutor
from listing_planner.application.planning.stages import (
    COUNT_FIELD,
    DISTANCE_FIELD,
    AddComputedFields,
    Count,
    Facet,
    GeoNear,
    Limit,
    Match,
    Pipeline,
    PipelineStage,
    Project,
    Skip,
    Sort,
    StageKind,
)

__all__ = [
    "ATTRACTIONS",
    "AVERAGE_PRICE_FIELD",
    "COUNT_BRANCH",
    "COUNT_FIELD",
    "DATA_BRANCH",
    "DISTANCE_FIELD",
    "DISTANCE_KM_FIELD",
    "EVENTS",
    "HOTELS",
    "METRES_PER_KM",
    "POPULARITY_FIELD",
    "PROFILES",
    "RELEVANCE_FIELD",
    "RESTAURANTS",
    "REVIEW_COUNT_FIELD",
    "SPORTS",
    "AddComputedFields",
    "CollectionProfile",
    "Count",
    "Equality",
    "Facet",
    "FacetedPager",
    "FilterRequest",
    "GeoClause",
    "GeoNear",
    "GeoOrigin",
    "LeafKind",
    "Limit",
    "ListingQueryPlanner",
    "ListingQueryService",
    "Match",
    "NumericRange",
    "Pipeline",
    "PipelineExecutor",
    "PipelineOptimizer",
    "PipelineStage",
    "PredicateBuilder",
    "PredicateDocument",
    "PredicateLeaf",
    "Project",
    "Range",
    "RangeField",
    "RankingStage",
    "RankingWeights",
    "RegexSubstring",
    "SetMembership",
    "Skip",
    "Sort",
    "SortDirection",
    "SortSpec",
    "StageKind",
    "TextSearch",
    "get_profile",
]
