"""Application-layer errors – planner invariants broken by the planner itself."""

from __future__ import annotations

from typing import Any

from listing_planner.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


class InvalidPipelineError(ApplicationError):
    """An assembled pipeline violates a structural invariant.

    Never expected in normal operation: it signals a planner bug (two
    competing selection stages, a text-search leaf twice in one predicate)
    and is surfaced as a server error, never repaired.
    """

    default_code = "invalid_pipeline"

    def __init__(
        self,
        message: str,
        *,
        stages: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, detail={"stages": stages or []}, **kwargs)
        self.stages: list[str] = stages or []


__all__ = ["ApplicationError", "InvalidPipelineError"]
