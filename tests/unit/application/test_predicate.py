"""Unit tests for predicate leaves and PredicateBuilder."""

from __future__ import annotations

from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st

from listing_planner.application.planning import (
    EVENTS,
    HOTELS,
    PROFILES,
    SPORTS,
    CollectionProfile,
    Equality,
    FilterRequest,
    GeoOrigin,
    LeafKind,
    NumericRange,
    PredicateBuilder,
    PredicateDocument,
    Range,
    RegexSubstring,
    SetMembership,
    TextSearch,
)
from listing_planner.kernel.errors import InvalidParameterError, InvalidPipelineError
from listing_planner.testing.fakes import InMemoryPipelineExecutor

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

STATUSES = ["active", "inactive", "pending", "draft"]


def _matching(docs: list[dict[str, Any]], predicate: PredicateDocument) -> list[dict[str, Any]]:
    executor = InMemoryPipelineExecutor({"hotels": docs})
    return executor.aggregate("hotels", [{"$match": predicate.to_mongo()}])


# ---------------------------------------------------------------------------
# Leaves
# ---------------------------------------------------------------------------


class TestLeaves:
    def test_equality(self) -> None:
        assert Equality("status", "active").to_mongo() == {"status": "active"}

    def test_range_both_bounds(self) -> None:
        assert Range("price", 1, 9).to_mongo() == {"price": {"$gte": 1, "$lte": 9}}

    def test_range_min_only_has_no_upper_cap(self) -> None:
        assert Range("price", minimum=1).to_mongo() == {"price": {"$gte": 1}}

    def test_range_without_bounds_is_invalid(self) -> None:
        with pytest.raises(InvalidPipelineError):
            Range("price")

    def test_set_membership(self) -> None:
        assert SetMembership("tags", ("a", "b")).to_mongo() == {"tags": {"$in": ["a", "b"]}}

    def test_regex_escapes_input(self) -> None:
        rendered = RegexSubstring(("name",), "a.b*").to_mongo()
        assert rendered == {"name": {"$regex": r"a\.b\*", "$options": "i"}}

    def test_regex_over_several_fields_is_any_of(self) -> None:
        rendered = RegexSubstring(("name", "description"), "spa").to_mongo()
        assert set(rendered) == {"$or"}
        assert len(rendered["$or"]) == 2

    def test_text_search(self) -> None:
        assert TextSearch("sea view").to_mongo() == {"$text": {"$search": "sea view"}}


class TestPredicateDocument:
    def test_empty_renders_empty(self) -> None:
        assert PredicateDocument().to_mongo() == {}

    def test_single_clause_renders_flat(self) -> None:
        doc = PredicateDocument((Equality("status", "active"),))
        assert doc.to_mongo() == {"status": "active"}

    def test_conjunction_renders_and(self) -> None:
        doc = PredicateDocument((Equality("a", 1), Equality("b", 2)))
        assert doc.to_mongo() == {"$and": [{"a": 1}, {"b": 2}]}

    def test_two_text_leaves_rejected(self) -> None:
        with pytest.raises(InvalidPipelineError):
            PredicateDocument((TextSearch("a"), TextSearch("b")))

    def test_and_returns_new_document(self) -> None:
        base = PredicateDocument((Equality("a", 1),))
        extended = base.and_(Equality("b", 2))
        assert len(base.clauses) == 1
        assert len(extended.clauses) == 2

    def test_leaves_by_kind(self) -> None:
        doc = PredicateDocument((Equality("a", 1), TextSearch("x")))
        assert doc.has_text_search
        assert doc.leaves(LeafKind.TEXT_SEARCH) == [TextSearch("x")]


# ---------------------------------------------------------------------------
# PredicateBuilder
# ---------------------------------------------------------------------------


class TestPredicateBuilder:
    def test_empty_request_is_visibility_only(self) -> None:
        for profile in PROFILES.values():
            predicate = PredicateBuilder(profile).build(FilterRequest())
            assert predicate.to_mongo() == {"status": "active"}

    @given(st.lists(st.sampled_from(STATUSES), max_size=20))
    def test_empty_request_matches_exactly_visible_documents(self, statuses: list[str]) -> None:
        docs = [{"_id": i, "status": s} for i, s in enumerate(statuses)]
        predicate = PredicateBuilder(HOTELS).build(FilterRequest())
        matched = [d["_id"] for d in _matching(docs, predicate)]
        assert matched == [d["_id"] for d in docs if d["status"] == "active"]

    def test_visibility_clause_is_first(self) -> None:
        req = FilterRequest(categories=frozenset({"Luxury"}), text="spa")
        predicate = PredicateBuilder(HOTELS).build(req)
        assert predicate.clauses[0] == Equality("status", "active")

    def test_single_category_is_equality(self) -> None:
        predicate = PredicateBuilder(HOTELS).build(FilterRequest(categories=frozenset({"Luxury"})))
        assert Equality("category", "Luxury") in predicate.clauses

    def test_several_categories_are_set_membership(self) -> None:
        req = FilterRequest(categories=frozenset({"Luxury", "Budget"}))
        predicate = PredicateBuilder(HOTELS).build(req)
        assert SetMembership("category", ("Budget", "Luxury")) in predicate.clauses

    def test_category_and_text_conjunction(self) -> None:
        req = FilterRequest(categories=frozenset({"Luxury"}), text="heritage")
        rendered = PredicateBuilder(HOTELS).build(req).to_mongo()
        assert rendered == {
            "$and": [
                {"status": "active"},
                {"category": "Luxury"},
                {"$text": {"$search": "heritage"}},
            ]
        }

    def test_paired_price_range_uses_both_paths(self) -> None:
        req = FilterRequest(ranges={"price": NumericRange(1000, 5000)})
        clauses = PredicateBuilder(HOTELS).build(req).clauses
        assert Range("priceRange.min", minimum=1000) in clauses
        assert Range("priceRange.max", maximum=5000) in clauses

    def test_paired_price_min_only(self) -> None:
        req = FilterRequest(ranges={"price": NumericRange(minimum=1000)})
        ranges = PredicateBuilder(HOTELS).build(req).leaves(LeafKind.RANGE)
        assert ranges == [Range("priceRange.min", minimum=1000)]

    def test_scalar_price_range_single_clause(self) -> None:
        req = FilterRequest(ranges={"price": NumericRange(10, 50)})
        ranges = PredicateBuilder(EVENTS).build(req).leaves(LeafKind.RANGE)
        assert ranges == [Range("ticketPrice", 10, 50)]

    def test_unknown_range_rejected(self) -> None:
        req = FilterRequest(ranges={"mealCost": NumericRange(1, 2)})
        with pytest.raises(InvalidParameterError):
            PredicateBuilder(HOTELS).build(req)

    def test_rating_floor(self) -> None:
        clauses = PredicateBuilder(HOTELS).build(FilterRequest(min_rating=4)).clauses
        assert Range("rating.average", minimum=4) in clauses

    def test_each_set_filter_targets_its_own_field(self) -> None:
        req = FilterRequest(
            memberships={"amenities": frozenset({"WiFi", "Pool"}), "tags": frozenset({"Heritage"})}
        )
        clauses = PredicateBuilder(HOTELS).build(req).clauses
        assert SetMembership("amenities", ("Pool", "WiFi")) in clauses
        assert SetMembership("tags", ("Heritage",)) in clauses

    def test_unknown_set_filter_rejected(self) -> None:
        req = FilterRequest(memberships={"amenities": frozenset({"Pool"})})
        with pytest.raises(InvalidParameterError):
            PredicateBuilder(EVENTS).build(req)

    def test_tags_match_tagged_documents_only(self) -> None:
        docs = [
            {"_id": 1, "status": "active", "tags": ["Heritage"], "amenities": ["WiFi"]},
            {"_id": 2, "status": "active", "tags": ["Business"], "amenities": ["Heritage"]},
        ]
        req = FilterRequest(memberships={"tags": frozenset({"Heritage"})})
        predicate = PredicateBuilder(HOTELS).build(req)
        assert [d["_id"] for d in _matching(docs, predicate)] == [1]

    def test_regex_filter(self) -> None:
        req = FilterRequest(matches={"venue": "Eden"})
        clauses = PredicateBuilder(EVENTS).build(req).clauses
        assert RegexSubstring(("venue.name",), "Eden") in clauses

    def test_equality_flag(self) -> None:
        req = FilterRequest(flags={"featured": True})
        clauses = PredicateBuilder(SPORTS).build(req).clauses
        assert Equality("featured", True) in clauses

    def test_sport_is_case_insensitive_substring(self) -> None:
        req = FilterRequest.from_params({"sport": "crick"}, SPORTS)
        clauses = PredicateBuilder(SPORTS).build(req).clauses
        assert RegexSubstring(("sport",), "crick") in clauses
        docs = [
            {"_id": 1, "status": "active", "sport": "Cricket"},
            {"_id": 2, "status": "active", "sport": "Tennis"},
        ]
        assert [d["_id"] for d in _matching(docs, PredicateDocument(clauses))] == [1]

    def test_unknown_flag_rejected(self) -> None:
        with pytest.raises(InvalidParameterError):
            PredicateBuilder(HOTELS).build(FilterRequest(flags={"hasParking": True}))

    def test_text_becomes_single_text_leaf(self) -> None:
        predicate = PredicateBuilder(HOTELS).build(FilterRequest(text="park street"))
        assert predicate.leaves(LeafKind.TEXT_SEARCH) == [TextSearch("park street")]
        assert predicate.leaves(LeafKind.REGEX_SUBSTRING) == []

    def test_regex_on_text_field_with_text_query_rejected(self) -> None:
        profile = CollectionProfile(
            name="sports",
            text_fields=SPORTS.text_fields,
            regex_fields={"sport": "sport"},
        )
        req = FilterRequest(text="cricket", matches={"sport": "Crick"})
        with pytest.raises(InvalidParameterError):
            PredicateBuilder(profile).build(req)

    def test_text_with_origin_falls_back_to_substring(self) -> None:
        req = FilterRequest(
            text="heritage", origin=GeoOrigin(22.5726, 88.3639), max_distance_km=5
        )
        predicate = PredicateBuilder(HOTELS).build(req)
        assert not predicate.has_text_search
        assert RegexSubstring(HOTELS.text_fields, "heritage") in predicate.clauses

    def test_build_is_deterministic(self) -> None:
        req = FilterRequest(
            categories=frozenset({"A", "B", "C"}),
            memberships={"amenities": frozenset({"x", "y"})},
            text="t",
        )
        builder = PredicateBuilder(HOTELS)
        assert builder.build(req) == builder.build(req)


# ---------------------------------------------------------------------------
# Range boundary semantics
# ---------------------------------------------------------------------------

_bound = st.integers(min_value=0, max_value=1000)


class TestRangeSemantics:
    @given(low=_bound, high=_bound, value=_bound)
    def test_scalar_range_inclusive(self, low: int, high: int, value: int) -> None:
        low, high = min(low, high), max(low, high)
        req = FilterRequest(ranges={"price": NumericRange(low, high)})
        predicate = PredicateBuilder(EVENTS).build(req)
        executor = InMemoryPipelineExecutor({"events": [{"status": "active", "ticketPrice": value}]})
        matched = executor.aggregate("events", [{"$match": predicate.to_mongo()}])
        assert bool(matched) == (low <= value <= high)

    @given(low=_bound, value=_bound)
    def test_min_only_has_no_upper_cap(self, low: int, value: int) -> None:
        req = FilterRequest(ranges={"price": NumericRange(minimum=low)})
        predicate = PredicateBuilder(EVENTS).build(req)
        executor = InMemoryPipelineExecutor({"events": [{"status": "active", "ticketPrice": value}]})
        matched = executor.aggregate("events", [{"$match": predicate.to_mongo()}])
        assert bool(matched) == (value >= low)

    @pytest.mark.parametrize("value", [100, 500])
    def test_boundary_values_match(self, value: int) -> None:
        req = FilterRequest(ranges={"price": NumericRange(100, 500)})
        predicate = PredicateBuilder(EVENTS).build(req)
        executor = InMemoryPipelineExecutor({"events": [{"status": "active", "ticketPrice": value}]})
        assert executor.aggregate("events", [{"$match": predicate.to_mongo()}])
