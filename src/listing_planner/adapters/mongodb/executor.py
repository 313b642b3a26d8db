"""MongoDB adapter – MongoPipelineExecutor."""

from __future__ import annotations

import time
from typing import Any

from pymongo.errors import PyMongoError

from listing_planner.application.planning.stages import Pipeline
from listing_planner.config.settings import PlannerSettings
from listing_planner.kernel.errors import StorageError, StorageTimeoutError
from listing_planner.observability.logging import get_logger
from listing_planner.resilience.timeouts import TimeoutPolicy

_log = get_logger(__name__)


class MongoPipelineExecutor:
    """Run planned pipelines through a motor database handle.

    The aggregate is drained in one call and bounded by a
    :class:`TimeoutPolicy`.  Driver failures surface as
    :class:`StorageError`, deadline expiry as :class:`StorageTimeoutError`;
    neither is retried.  ``asyncio.CancelledError`` is not caught, so a
    cancelled request abandons the cursor.

    Usage::

        executor = MongoPipelineExecutor(client["listings"])
        docs = await executor.execute("hotels", pipeline)
    """

    def __init__(self, database: Any, timeout: TimeoutPolicy | None = None) -> None:
        self._db = database
        self._timeout = timeout or TimeoutPolicy(PlannerSettings().query_timeout_seconds)

    @classmethod
    def from_settings(cls, settings: PlannerSettings) -> "MongoPipelineExecutor":
        """Open a motor client for ``settings.mongo_uri`` and bind ``settings.database``."""
        from motor.motor_asyncio import AsyncIOMotorClient

        client = AsyncIOMotorClient(settings.mongo_uri)
        return cls(client[settings.database], TimeoutPolicy(settings.query_timeout_seconds))

    @property
    def database(self) -> Any:
        return self._db

    async def execute(self, collection: str, pipeline: Pipeline) -> list[dict[str, Any]]:
        stages = pipeline.to_mongo()
        started = time.perf_counter()

        async def run() -> list[dict[str, Any]]:
            cursor = self._db[collection].aggregate(stages)
            return await cursor.to_list(length=None)

        try:
            docs = await self._timeout.execute(run, collection=collection)
        except StorageTimeoutError as exc:
            _log.warning("listing.execute.failed", reason="timeout", **exc.log_fields())
            raise
        except PyMongoError as exc:
            _log.warning(
                "listing.execute.failed",
                collection=collection,
                reason=type(exc).__name__,
            )
            raise StorageError(
                f"Aggregation on '{collection}' failed: {exc}",
                collection=collection,
                cause=exc,
            ) from exc

        _log.debug(
            "listing.execute.completed",
            collection=collection,
            stages=len(stages),
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return docs

    async def explain(self, collection: str, pipeline: Pipeline) -> dict[str, Any]:
        """Return the server's explain document for *pipeline* (``executionStats``)."""
        try:
            return await self._timeout.execute(
                lambda: self._db.command(
                    "explain",
                    {"aggregate": collection, "pipeline": pipeline.to_mongo(), "cursor": {}},
                    verbosity="executionStats",
                ),
                collection=collection,
                operation="explain",
            )
        except PyMongoError as exc:
            raise StorageError(
                f"Explain on '{collection}' failed: {exc}",
                collection=collection,
                operation="explain",
                cause=exc,
            ) from exc


__all__ = ["MongoPipelineExecutor"]
