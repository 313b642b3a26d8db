"""Application planning – PipelineStage variants and Pipeline.

Every stage is an immutable value with a ``kind`` tag, so the optimizer can
inspect and reorder a stage list without touching the storage driver.
``to_mongo()`` renders the aggregation-framework document.
"""
from __future__ import annotations

import abc
import dataclasses
from enum import Enum
from typing import Any, ClassVar, Iterator, Mapping

from listing_planner.application.planning.predicate import PredicateDocument
from listing_planner.application.planning.request import GeoOrigin

DISTANCE_FIELD = "distance"
COUNT_FIELD = "total"


class StageKind(str, Enum):
    MATCH = "match"
    GEO_NEAR = "geo_near"
    PROJECT = "project"
    ADD_COMPUTED_FIELDS = "add_computed_fields"
    SORT = "sort"
    SKIP = "skip"
    LIMIT = "limit"
    COUNT = "count"
    FACET = "facet"


class PipelineStage(abc.ABC):
    kind: ClassVar[StageKind]

    @abc.abstractmethod
    def to_mongo(self) -> dict[str, Any]: ...


@dataclasses.dataclass(frozen=True)
class Match(PipelineStage):
    kind: ClassVar[StageKind] = StageKind.MATCH

    predicate: PredicateDocument

    def to_mongo(self) -> dict[str, Any]:
        return {"$match": self.predicate.to_mongo()}


@dataclasses.dataclass(frozen=True)
class GeoNear(PipelineStage):
    """Proximity selection carrying the full boolean predicate as its own query."""
    kind: ClassVar[StageKind] = StageKind.GEO_NEAR

    origin: GeoOrigin
    max_distance: float
    predicate: PredicateDocument
    distance_field: str = DISTANCE_FIELD
    key: str | None = None

    def to_mongo(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "near": self.origin.to_geojson(),
            "distanceField": self.distance_field,
            "maxDistance": self.max_distance,
            "spherical": True,
            "query": self.predicate.to_mongo(),
        }
        if self.key is not None:
            body["key"] = self.key
        return {"$geoNear": body}


@dataclasses.dataclass(frozen=True)
class Project(PipelineStage):
    kind: ClassVar[StageKind] = StageKind.PROJECT

    fields: tuple[str, ...]

    def to_mongo(self) -> dict[str, Any]:
        return {"$project": {name: 1 for name in self.fields}}


@dataclasses.dataclass(frozen=True)
class AddComputedFields(PipelineStage):
    """Adds derived fields; never removes documents."""
    kind: ClassVar[StageKind] = StageKind.ADD_COMPUTED_FIELDS

    fields: Mapping[str, Any]

    def to_mongo(self) -> dict[str, Any]:
        return {"$addFields": dict(self.fields)}


@dataclasses.dataclass(frozen=True)
class Sort(PipelineStage):
    kind: ClassVar[StageKind] = StageKind.SORT

    keys: tuple[tuple[str, int], ...]

    def __post_init__(self) -> None:
        if not self.keys:
            raise ValueError("sort needs at least one key")

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.keys)

    def to_mongo(self) -> dict[str, Any]:
        return {"$sort": dict(self.keys)}


@dataclasses.dataclass(frozen=True)
class Skip(PipelineStage):
    kind: ClassVar[StageKind] = StageKind.SKIP

    count: int

    def to_mongo(self) -> dict[str, Any]:
        return {"$skip": self.count}


@dataclasses.dataclass(frozen=True)
class Limit(PipelineStage):
    kind: ClassVar[StageKind] = StageKind.LIMIT

    count: int

    def to_mongo(self) -> dict[str, Any]:
        return {"$limit": self.count}


@dataclasses.dataclass(frozen=True)
class Count(PipelineStage):
    kind: ClassVar[StageKind] = StageKind.COUNT

    field: str = COUNT_FIELD

    def to_mongo(self) -> dict[str, Any]:
        return {"$count": self.field}


@dataclasses.dataclass(frozen=True)
class Facet(PipelineStage):
    """Named sub-pipelines evaluated over the same upstream document stream."""
    kind: ClassVar[StageKind] = StageKind.FACET

    branches: Mapping[str, tuple[PipelineStage, ...]]

    def to_mongo(self) -> dict[str, Any]:
        return {
            "$facet": {
                name: [stage.to_mongo() for stage in stages]
                for name, stages in self.branches.items()
            }
        }


@dataclasses.dataclass(frozen=True)
class Pipeline:
    """Ordered, immutable stage sequence handed to the storage driver."""

    stages: tuple[PipelineStage, ...]

    def __iter__(self) -> Iterator[PipelineStage]:
        return iter(self.stages)

    def __len__(self) -> int:
        return len(self.stages)

    def __getitem__(self, index: int) -> PipelineStage:
        return self.stages[index]

    @property
    def kinds(self) -> tuple[StageKind, ...]:
        return tuple(stage.kind for stage in self.stages)

    def to_mongo(self) -> list[dict[str, Any]]:
        return [stage.to_mongo() for stage in self.stages]


__all__ = [
    "COUNT_FIELD",
    "DISTANCE_FIELD",
    "AddComputedFields",
    "Count",
    "Facet",
    "GeoNear",
    "Limit",
    "Match",
    "Pipeline",
    "PipelineStage",
    "Project",
    "Skip",
    "Sort",
    "StageKind",
]
