"""Application planning – RankingWeights and RankingStage.

The popularity blend is a fixed policy::

    popularity = 0.3 * rating + 0.0001 * views + 2 (featured) + 1 (promoted)

Text queries rank by the engine's relevance score instead.
"""
from __future__ import annotations

import dataclasses
from typing import Any

from listing_planner.application.planning.profiles import CollectionProfile
from listing_planner.application.planning.stages import AddComputedFields
from listing_planner.config.settings import PlannerSettings

POPULARITY_FIELD = "popularity"
RELEVANCE_FIELD = "score"


@dataclasses.dataclass(frozen=True)
class RankingWeights:
    rating: float = 0.3
    views: float = 0.0001
    featured: float = 2.0
    promoted: float = 1.0

    @classmethod
    def from_settings(cls, settings: PlannerSettings) -> "RankingWeights":
        return cls(
            rating=settings.rating_weight,
            views=settings.views_weight,
            featured=settings.featured_boost,
            promoted=settings.promoted_boost,
        )

    def score(
        self,
        rating: float = 0.0,
        views: float = 0.0,
        featured: bool = False,
        promoted: bool = False,
    ) -> float:
        """Evaluate the blend in Python, with the same terms as the pipeline expression."""
        total = self.rating * rating + self.views * views
        if featured:
            total += self.featured
        if promoted:
            total += self.promoted
        return total


class RankingStage:
    """Build the computed ranking field for a collection."""

    def __init__(self, profile: CollectionProfile, weights: RankingWeights | None = None) -> None:
        self._profile = profile
        self._weights = weights or RankingWeights()

    @property
    def weights(self) -> RankingWeights:
        return self._weights

    def compute(self, has_text_query: bool) -> AddComputedFields:
        if has_text_query:
            return AddComputedFields({RELEVANCE_FIELD: {"$meta": "textScore"}})
        return AddComputedFields({POPULARITY_FIELD: self._popularity_expression()})

    def _popularity_expression(self) -> dict[str, Any]:
        p, w = self._profile, self._weights
        terms: list[Any] = [
            {"$multiply": [{"$ifNull": [f"${p.rating_field}", 0]}, w.rating]},
            {"$multiply": [{"$ifNull": [f"${p.views_field}", 0]}, w.views]},
        ]
        if p.featured_field:
            terms.append({"$cond": [{"$eq": [f"${p.featured_field}", True]}, w.featured, 0]})
        if p.promoted_field:
            terms.append({"$cond": [{"$eq": [f"${p.promoted_field}", True]}, w.promoted, 0]})
        return {"$add": terms}


__all__ = ["POPULARITY_FIELD", "RELEVANCE_FIELD", "RankingStage", "RankingWeights"]
