"""Application pagination – PageResult and to_page_result."""
from __future__ import annotations

import dataclasses
import math
from typing import Any, Callable, Generic, Mapping, Sequence, TypeVar

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class PageResult(Generic[T]):
    """One page of listings plus the size of the whole filtered set.

    ``total_count`` counts the matches before pagination and does not depend
    on how many items this page holds.
    """

    items: list[T]
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0 or self.total_count <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page * self.page_size < self.total_count

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def map(self, fn: Callable[[T], Any]) -> "PageResult[Any]":
        """Return a new :class:`PageResult` with each item transformed by *fn*."""
        return PageResult(
            items=[fn(item) for item in self.items],
            total_count=self.total_count,
            page=self.page,
            page_size=self.page_size,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": list(self.items),
            "totalCount": self.total_count,
            "page": self.page,
            "pageSize": self.page_size,
            "totalPages": self.total_pages,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


def to_page_result(
    facet_output: Sequence[Mapping[str, Any]],
    page: int,
    page_size: int,
    *,
    data_branch: str = "data",
    count_branch: str = "count",
    count_field: str = "total",
) -> PageResult[dict[str, Any]]:
    """Fold the single ``$facet`` output document into a :class:`PageResult`.

    An empty upstream stream yields ``{"data": [], "count": []}`` (the
    ``$count`` stage emits nothing for zero documents); that is a total of 0,
    not an error.
    """
    facet = facet_output[0] if facet_output else {}
    items = list(facet.get(data_branch) or [])
    counts = facet.get(count_branch) or []
    total = int(counts[0].get(count_field, 0)) if counts else 0
    return PageResult(items=items, total_count=total, page=page, page_size=page_size)


__all__ = ["PageResult", "to_page_result"]
