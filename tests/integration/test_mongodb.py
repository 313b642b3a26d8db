"""Integration tests for the MongoDB adapter against a real server.

Run with::

    pytest -m integration tests/integration/test_mongodb.py -v

Requires Docker (used automatically via ``testcontainers``).
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

import pytest
from testcontainers.mongodb import MongoDbContainer

from listing_planner.adapters.mongodb import (
    SAMPLE_HOTELS,
    ListingIndexManager,
    ListingSeeder,
    MongoPipelineExecutor,
)
from listing_planner.application.planning import (
    HOTELS,
    FilterRequest,
    GeoOrigin,
    ListingQueryService,
    Pipeline,
    PipelineStage,
    SortDirection,
    SortSpec,
    StageKind,
)
from listing_planner.kernel.errors import StorageError

KOLKATA = GeoOrigin(22.5726, 88.3639)


# ---------------------------------------------------------------------------
# MongoDB fixture (one container per module)
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def mongo_uri() -> str:  # type: ignore[return]
    with MongoDbContainer("mongo:7.0") as mongo:
        yield mongo.get_connection_url()


@pytest.fixture()
def db_name(request: Any) -> str:
    """Return a fresh DB name for each test, derived from the test id."""
    safe_name = request.node.nodeid.replace("/", "_").replace("::", "_").replace(".", "_")
    return safe_name[-63:]  # MongoDB DB name limit


@pytest.fixture()
def run(mongo_uri: str, db_name: str) -> Callable[[Callable[[Any], Awaitable[Any]]], Any]:
    """Run ``body(db)`` on a seeded, indexed database inside one event loop."""
    import motor.motor_asyncio as motor_async  # type: ignore[import]

    def runner(body: Callable[[Any], Awaitable[Any]]) -> Any:
        async def main() -> Any:
            client = motor_async.AsyncIOMotorClient(mongo_uri)
            try:
                db = client[db_name]
                await ListingIndexManager.create_indexes(db, [HOTELS])
                await ListingSeeder(db).seed_if_empty("hotels")
                return await body(db)
            finally:
                client.close()

        return asyncio.run(main())

    return runner


def _names(page: Any) -> list[str]:
    return [item["name"] for item in page.items]


# ---------------------------------------------------------------------------
# Indexes and seeding
# ---------------------------------------------------------------------------


@pytest.mark.integration
class TestIndexesAndSeed:
    def test_indexes_exist(self, run: Any) -> None:
        async def body(db: Any) -> dict[str, Any]:
            return await db["hotels"].index_information()

        info = run(body)
        expected = {name for name, _ in ListingIndexManager.index_plan(HOTELS)}
        assert expected <= set(info)

    def test_create_indexes_is_idempotent(self, run: Any) -> None:
        async def body(db: Any) -> list[str]:
            return await ListingIndexManager.create_indexes(db, [HOTELS])

        assert len(run(body)) == len(ListingIndexManager.index_plan(HOTELS))

    def test_seed_runs_once(self, run: Any) -> None:
        async def body(db: Any) -> tuple[int, int]:
            again = await ListingSeeder(db).seed_if_empty("hotels")
            return again, await db["hotels"].count_documents({})

        assert run(body) == (0, len(SAMPLE_HOTELS))


# ---------------------------------------------------------------------------
# Planned pipelines on a real engine
# ---------------------------------------------------------------------------


@pytest.mark.integration
class TestPlannedQueries:
    def _search(self, run: Any, request: FilterRequest) -> Any:
        async def body(db: Any) -> Any:
            return await ListingQueryService(MongoPipelineExecutor(db)).search("hotels", request)

        return run(body)

    def test_default_listing(self, run: Any) -> None:
        page = self._search(run, FilterRequest())
        assert page.total_count == len(SAMPLE_HOTELS)
        popularity = [item["popularity"] for item in page.items]
        assert popularity == sorted(popularity, reverse=True)
        assert all("reviewCount" in item for item in page.items)

    def test_pagination_splits_total(self, run: Any) -> None:
        first = self._search(run, FilterRequest(page=1, page_size=2))
        second = self._search(run, FilterRequest(page=2, page_size=2))
        third = self._search(run, FilterRequest(page=3, page_size=2))
        assert first.total_count == second.total_count == len(SAMPLE_HOTELS)
        seen = _names(first) + _names(second) + _names(third)
        assert len(seen) == len(set(seen)) == len(SAMPLE_HOTELS)
        assert first.has_next and not third.has_next

    def test_text_search(self, run: Any) -> None:
        page = self._search(run, FilterRequest(text="heritage"))
        assert page.total_count >= 1
        scores = [item["score"] for item in page.items]
        assert scores == sorted(scores, reverse=True)

    def test_geo_search(self, run: Any) -> None:
        page = self._search(run, FilterRequest(origin=KOLKATA, max_distance_km=50))
        distances = [item["distance"] for item in page.items]
        assert distances == sorted(distances)
        assert all(item["distanceKm"] <= 50 for item in page.items)

    def test_geo_with_text(self, run: Any) -> None:
        page = self._search(run, FilterRequest(origin=KOLKATA, max_distance_km=50, text="hotel"))
        for item in page.items:
            assert item["distance"] <= 50_000

    def test_price_and_rating(self, run: Any) -> None:
        req = FilterRequest(
            min_rating=4.0,
            sort=SortSpec("price", SortDirection.ASC),
        )
        page = self._search(run, req)
        assert all(item["rating"]["average"] >= 4.0 for item in page.items)
        prices = [item["priceRange"]["min"] for item in page.items]
        assert prices == sorted(prices)

    def test_tags_and_amenities_filter_their_own_fields(self, run: Any) -> None:
        tagged = self._search(run, FilterRequest(memberships={"tags": frozenset({"Heritage"})}))
        assert _names(tagged) == ["The Astor Kolkata"]
        parking = self._search(
            run, FilterRequest(memberships={"amenities": frozenset({"Parking"})})
        )
        assert _names(parking) == ["Budget Inn Kolkata"]

    def test_average_price_on_geo_search(self, run: Any) -> None:
        page = self._search(run, FilterRequest(origin=KOLKATA, max_distance_km=1))
        (astor,) = [item for item in page.items if item["name"] == "The Astor Kolkata"]
        assert astor["averagePrice"] == 16500

    def test_empty_page(self, run: Any) -> None:
        page = self._search(run, FilterRequest(categories=frozenset({"Nonexistent"})))
        assert page.items == []
        assert page.total_count == 0

    def test_explain(self, run: Any) -> None:
        async def body(db: Any) -> dict[str, Any]:
            executor = MongoPipelineExecutor(db)
            pipeline = ListingQueryService(executor).planner("hotels").plan_or_raise(FilterRequest())
            return await executor.explain("hotels", pipeline)

        assert run(body)["ok"] == 1


class _UnknownStage(PipelineStage):
    kind = StageKind.MATCH

    def to_mongo(self) -> dict[str, Any]:
        return {"$notAStage": {}}


@pytest.mark.integration
def test_server_error_becomes_storage_error(run: Any) -> None:
    async def body(db: Any) -> Any:
        return await MongoPipelineExecutor(db).execute("hotels", Pipeline((_UnknownStage(),)))

    with pytest.raises(StorageError) as info:
        run(body)
    assert info.value.collection == "hotels"
