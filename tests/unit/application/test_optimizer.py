"""Unit tests for PipelineOptimizer."""

from __future__ import annotations

from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st
from structlog.testing import capture_logs

from listing_planner.application.planning import (
    AddComputedFields,
    Count,
    Equality,
    Facet,
    GeoNear,
    GeoOrigin,
    Limit,
    Match,
    PipelineOptimizer,
    PredicateDocument,
    Project,
    Skip,
    Sort,
    StageKind,
)
from listing_planner.kernel.errors import InvalidPipelineError

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

VISIBLE = PredicateDocument((Equality("status", "active"),))

_non_selection = st.one_of(
    st.builds(lambda n: Project((f"f{n}",)), st.integers(0, 5)),
    st.builds(lambda n: AddComputedFields({f"c{n}": 1}), st.integers(0, 5)),
    st.builds(lambda n: Sort(((f"s{n}", 1),)), st.integers(0, 5)),
    st.builds(Skip, st.integers(0, 50)),
    st.builds(Limit, st.integers(1, 50)),
    st.just(Facet({"data": (Limit(1),), "count": (Count(),)})),
)
_selection = st.one_of(
    st.just(Match(VISIBLE)),
    st.just(GeoNear(GeoOrigin(22.5726, 88.3639), 10000, VISIBLE)),
)
stage_lists = st.lists(st.one_of(_non_selection, _selection), max_size=12)
single_selection_lists = st.builds(
    lambda rest, sel, at: [*rest[:at], sel, *rest[at:]],
    st.lists(_non_selection, max_size=10),
    _selection,
    st.integers(0, 10),
)

_SELECTION = {StageKind.MATCH, StageKind.GEO_NEAR}
_SHAPING = _SELECTION | {StageKind.PROJECT, StageKind.ADD_COMPUTED_FIELDS}
_TAIL = {StageKind.SKIP, StageKind.LIMIT, StageKind.FACET, StageKind.COUNT}


def _indices(stages: tuple[Any, ...], kinds: set[StageKind]) -> list[int]:
    return [i for i, s in enumerate(stages) if s.kind in kinds]


# ---------------------------------------------------------------------------
# reorder
# ---------------------------------------------------------------------------


class TestReorder:
    @given(stage_lists)
    def test_idempotent(self, stages: list[Any]) -> None:
        optimizer = PipelineOptimizer()
        once = optimizer.reorder(stages)
        assert optimizer.reorder(once) == once

    @given(stage_lists)
    def test_is_a_permutation(self, stages: list[Any]) -> None:
        reordered = PipelineOptimizer().reorder(stages)
        assert sorted(map(id, reordered)) == sorted(map(id, stages))

    @given(stage_lists)
    def test_sort_between_shaping_and_tail(self, stages: list[Any]) -> None:
        reordered = PipelineOptimizer().reorder(stages)
        for sort_at in _indices(reordered, {StageKind.SORT}):
            assert all(i < sort_at for i in _indices(reordered, _SHAPING))
            assert all(i > sort_at for i in _indices(reordered, _TAIL))

    @given(stage_lists)
    def test_precedence_is_non_decreasing(self, stages: list[Any]) -> None:
        optimizer = PipelineOptimizer()
        ranks = [optimizer.precedence(s) for s in optimizer.reorder(stages)]
        assert ranks == sorted(ranks)

    def test_stable_within_class(self) -> None:
        a = AddComputedFields({"a": 1})
        b = AddComputedFields({"b": 1})
        reordered = PipelineOptimizer().reorder([Sort((("x", 1),)), b, Match(VISIBLE), a])
        assert reordered == (Match(VISIBLE), b, a, Sort((("x", 1),)))

    def test_full_precedence_order(self) -> None:
        stages = [
            Limit(5),
            Sort((("x", 1),)),
            AddComputedFields({"p": 1}),
            Project(("name",)),
            Skip(5),
            Match(VISIBLE),
        ]
        kinds = [s.kind for s in PipelineOptimizer().reorder(stages)]
        assert kinds == [
            StageKind.MATCH,
            StageKind.PROJECT,
            StageKind.ADD_COMPUTED_FIELDS,
            StageKind.SORT,
            StageKind.LIMIT,
            StageKind.SKIP,
        ]

    def test_pure(self) -> None:
        stages = [Sort((("x", 1),)), Match(VISIBLE)]
        PipelineOptimizer().reorder(stages)
        assert stages[0].kind is StageKind.SORT


# ---------------------------------------------------------------------------
# validate / optimize
# ---------------------------------------------------------------------------


class TestValidate:
    @given(single_selection_lists)
    def test_single_selection_always_valid_after_reorder(self, stages: list[Any]) -> None:
        optimized = PipelineOptimizer().optimize(stages)
        assert optimized[0].kind in _SELECTION

    def test_match_and_geo_near_compete(self) -> None:
        geo = GeoNear(GeoOrigin(22.5726, 88.3639), 10000, VISIBLE)
        with pytest.raises(InvalidPipelineError) as info:
            PipelineOptimizer().optimize([geo, Match(VISIBLE)])
        assert info.value.stages == ["geo_near", "match"]

    def test_two_matches_rejected(self) -> None:
        with pytest.raises(InvalidPipelineError):
            PipelineOptimizer().validate([Match(VISIBLE), Match(VISIBLE)])

    def test_geo_near_not_first_rejected(self) -> None:
        geo = GeoNear(GeoOrigin(22.5726, 88.3639), 10000, VISIBLE)
        with pytest.raises(InvalidPipelineError):
            PipelineOptimizer().validate([Project(("name",)), geo])

    def test_violation_is_logged(self) -> None:
        with capture_logs() as logs, pytest.raises(InvalidPipelineError):
            PipelineOptimizer().validate([Match(VISIBLE), Match(VISIBLE)])
        assert logs[0]["event"] == "listing.plan.invalid_pipeline"
        assert logs[0]["log_level"] == "error"

    def test_pipeline_without_selection_is_valid(self) -> None:
        assert PipelineOptimizer().validate([Limit(1)]) == (Limit(1),)
