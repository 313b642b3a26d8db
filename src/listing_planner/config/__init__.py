"""Config – 12-factor settings and loaders."""

from listing_planner.config.settings import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    PlannerSettings,
    Settings,
    SettingsFactory,
    SettingsLoader,
)
from listing_planner.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "PlannerSettings",
    "Settings",
    "SettingsFactory",
    "SettingsLoader",
]
