"""Config settings – 12-factor env-based configuration."""
from listing_planner.config.settings.base import PlannerSettings, Settings
from listing_planner.config.settings.factory import SettingsFactory
from listing_planner.config.settings.loaders import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    SettingsLoader,
    build_settings,
)

__all__ = [
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "PlannerSettings",
    "Settings",
    "SettingsFactory",
    "SettingsLoader",
    "build_settings",
]
