"""Application planning – PipelineOptimizer.

Stable partition of a stage list into precedence classes::

    0  Match / GeoNear         selection, index-eligible only when first
    1  Project                 shrink documents before computing
    2  AddComputedFields, …    non-selective transforms
    3  Sort
    4  Skip / Limit / Count / Facet

Relative order inside a class is preserved, so ``reorder`` is idempotent.
"""
from __future__ import annotations

from typing import Iterable

from listing_planner.application.planning.stages import PipelineStage, StageKind
from listing_planner.kernel.errors import InvalidPipelineError
from listing_planner.observability.logging import get_logger

_log = get_logger(__name__)

SELECTION_KINDS = frozenset({StageKind.MATCH, StageKind.GEO_NEAR})

_PRECEDENCE: dict[StageKind, int] = {
    StageKind.MATCH: 0,
    StageKind.GEO_NEAR: 0,
    StageKind.PROJECT: 1,
    StageKind.ADD_COMPUTED_FIELDS: 2,
    StageKind.SORT: 3,
    StageKind.SKIP: 4,
    StageKind.LIMIT: 4,
    StageKind.COUNT: 4,
    StageKind.FACET: 4,
}
_TRANSFORM_CLASS = 2


class PipelineOptimizer:
    """Reorder and check stage lists; pure and side-effect free apart from logging."""

    @staticmethod
    def precedence(stage: PipelineStage) -> int:
        return _PRECEDENCE.get(stage.kind, _TRANSFORM_CLASS)

    def reorder(self, stages: Iterable[PipelineStage]) -> tuple[PipelineStage, ...]:
        # sorted() is stable, which keeps same-class stages in caller order
        return tuple(sorted(stages, key=self.precedence))

    def validate(self, stages: Iterable[PipelineStage]) -> tuple[PipelineStage, ...]:
        """Raise :class:`InvalidPipelineError` on competing or misplaced selections."""
        stages = tuple(stages)
        kinds = [stage.kind.value for stage in stages]
        selections = [i for i, stage in enumerate(stages) if stage.kind in SELECTION_KINDS]
        if len(selections) > 1:
            _log.error("listing.plan.invalid_pipeline", reason="competing_selection", stages=kinds)
            raise InvalidPipelineError(
                "pipeline holds more than one selection stage", stages=kinds
            )
        geo = [i for i, stage in enumerate(stages) if stage.kind is StageKind.GEO_NEAR]
        if geo and geo[0] != 0:
            _log.error("listing.plan.invalid_pipeline", reason="geo_near_not_first", stages=kinds)
            raise InvalidPipelineError("$geoNear must be the first stage", stages=kinds)
        return stages

    def optimize(self, stages: Iterable[PipelineStage]) -> tuple[PipelineStage, ...]:
        return self.validate(self.reorder(stages))


__all__ = ["SELECTION_KINDS", "PipelineOptimizer"]
