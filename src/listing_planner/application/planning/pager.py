"""Application planning – FacetedPager."""
from __future__ import annotations

from typing import Iterable

from listing_planner.application.planning.stages import (
    COUNT_FIELD,
    Count,
    Facet,
    Limit,
    Pipeline,
    PipelineStage,
    Skip,
)
from listing_planner.kernel.errors import InvalidParameterError

DATA_BRANCH = "data"
COUNT_BRANCH = "count"


class FacetedPager:
    """Close a stage list with one ``$facet`` producing a page and the total.

    Both branches read the same upstream stream, so the count always
    describes the set the page was cut from.
    """

    def paginate(self, stages: Iterable[PipelineStage], page: int, page_size: int) -> Pipeline:
        if page < 1:
            raise InvalidParameterError("page", "must be >= 1", value=page)
        if page_size <= 0:
            raise InvalidParameterError("pageSize", "must be > 0", value=page_size)

        offset = (page - 1) * page_size
        data: tuple[PipelineStage, ...] = (Limit(page_size),)
        if offset:
            data = (Skip(offset), *data)

        facet = Facet({DATA_BRANCH: data, COUNT_BRANCH: (Count(COUNT_FIELD),)})
        return Pipeline((*stages, facet))


__all__ = ["COUNT_BRANCH", "DATA_BRANCH", "FacetedPager"]
