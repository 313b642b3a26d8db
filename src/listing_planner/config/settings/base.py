"""Config settings – Settings base class and PlannerSettings."""
from __future__ import annotations

import dataclasses

from listing_planner.config.validation.errors import InvalidSettingValueError


@dataclasses.dataclass(frozen=True)
class Settings:
    """Base class for 12-factor settings."""

    _prefix: dataclasses.ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


@dataclasses.dataclass(frozen=True)
class PlannerSettings(Settings):
    """Knobs owned by the deployment, read from ``LISTING_*`` variables.

    The ranking weights are a fixed policy; they are configurable only so
    that a deployment can pin them explicitly, not so they can be tuned.
    """

    _prefix: dataclasses.ClassVar[str] = "LISTING"

    max_page_size: int = 100
    default_page_size: int = 12
    default_max_distance_km: int = 50
    rating_weight: float = 0.3
    views_weight: float = 0.0001
    featured_boost: float = 2.0
    promoted_boost: float = 1.0
    query_timeout_seconds: float = 10.0
    mongo_uri: str = "mongodb://localhost:27017"
    database: str = "listings"

    def _validate(self) -> None:
        if self.max_page_size < 1:
            raise InvalidSettingValueError("max_page_size", self.max_page_size, "must be >= 1")
        if not 1 <= self.default_page_size <= self.max_page_size:
            raise InvalidSettingValueError(
                "default_page_size",
                self.default_page_size,
                f"must be between 1 and max_page_size ({self.max_page_size})",
            )
        if self.default_max_distance_km <= 0:
            raise InvalidSettingValueError(
                "default_max_distance_km", self.default_max_distance_km, "must be > 0"
            )
        if self.query_timeout_seconds <= 0:
            raise InvalidSettingValueError(
                "query_timeout_seconds", self.query_timeout_seconds, "must be > 0"
            )


__all__ = ["PlannerSettings", "Settings"]
