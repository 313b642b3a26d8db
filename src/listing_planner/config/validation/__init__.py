"""Config validation errors."""
from listing_planner.config.validation.errors import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
    env_key_for,
)

__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError", "env_key_for"]
