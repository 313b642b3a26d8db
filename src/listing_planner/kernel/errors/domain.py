"""Domain errors – caller-supplied input that the planner cannot accept."""

from __future__ import annotations

from typing import Any

from listing_planner.kernel.errors.base import BaseError


class DomainError(BaseError):
    """Raised when a request breaks a listing rule."""

    default_code = "domain_error"


class InvalidParameterError(DomainError):
    """A filter value is malformed or out of range.

    Raised while a :class:`~listing_planner.application.planning.FilterRequest`
    is normalised, before any pipeline stage exists.  ``parameter`` names the
    offending query parameter and ``value`` echoes what was received.
    """

    default_code = "invalid_parameter"

    def __init__(
        self,
        parameter: str,
        reason: str,
        *,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"Invalid value for '{parameter}': {reason}",
            detail={"parameter": parameter, "value": value, "reason": reason},
            **kwargs,
        )
        self.parameter = parameter
        self.value = value
        self.reason = reason


__all__ = ["DomainError", "InvalidParameterError"]
