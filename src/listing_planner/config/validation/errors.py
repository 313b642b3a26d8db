"""Config validation errors.

Settings come from ``LISTING_*`` environment variables or a ``.env`` file.
A rejected value is reported with both the dataclass field and the variable
that feeds it, so the offending line can be found in the deployment.
"""
from __future__ import annotations

from typing import Any

from listing_planner.kernel.errors import ApplicationError


def env_key_for(prefix: str, field_name: str) -> str:
    """``env_key_for("LISTING", "max_page_size") == "LISTING_MAX_PAGE_SIZE"``."""
    return f"{prefix}_{field_name}".upper().lstrip("_")


class ConfigError(ApplicationError):
    """Configuration could not be loaded or is unusable."""
    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    default_code = "missing_required_setting"

    def __init__(self, setting: str, *, env_key: str | None = None) -> None:
        super().__init__(
            f"Required setting '{env_key or setting}' is missing",
            detail={"setting": setting, "env_key": env_key},
        )
        self.setting = setting
        self.env_key = env_key


class InvalidSettingValueError(ConfigError):
    """A value is present but unusable (not a number, page sizes out of order, ...)."""
    default_code = "invalid_setting_value"

    def __init__(
        self,
        setting: str,
        value: Any,
        reason: str,
        *,
        env_key: str | None = None,
    ) -> None:
        super().__init__(
            f"Setting '{env_key or setting}' has invalid value {value!r}: {reason}",
            detail={"setting": setting, "env_key": env_key, "value": value, "reason": reason},
        )
        self.setting = setting
        self.value = value
        self.reason = reason
        self.env_key = env_key

    def from_source(self, env_key: str) -> "InvalidSettingValueError":
        """Return a copy that names the variable *env_key* as the value's source."""
        return InvalidSettingValueError(self.setting, self.value, self.reason, env_key=env_key)


__all__ = [
    "ConfigError",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "env_key_for",
]
