"""Config settings – SettingsFactory."""
from __future__ import annotations

from typing import Any, Mapping, Sequence, TypeVar

from listing_planner.config.settings.base import Settings
from listing_planner.config.settings.loaders import SettingsLoader, build_settings
from listing_planner.config.validation.errors import ConfigError
from listing_planner.observability.logging import get_logger

_log = get_logger(__name__)

T = TypeVar("T", bound=Settings)


class SettingsFactory:
    """Layer several sources into one settings object.

    Usage::

        settings = SettingsFactory.create(
            PlannerSettings,
            [DotenvSettingsLoader(".env"), EnvSettingsLoader()],
            overrides={"max_page_size": 50},
        )

    Only values a source actually supplies take part, so a later loader
    never resets a field an earlier one set.  A loader failing with
    :class:`ConfigError` is skipped with a warning.
    """

    @staticmethod
    def create(
        settings_cls: type[T],
        loaders: Sequence[SettingsLoader] | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> T:
        """
        Parameters
        ----------
        settings_cls:
            The :class:`~listing_planner.config.settings.base.Settings`
            subclass to construct.
        loaders:
            Ordered sources; later loaders win per field.
        overrides:
            Applied last, above every loader.

        Raises
        ------
        MissingRequiredSettingError
            A field without a default is supplied by no source.
        InvalidSettingValueError
            The layered values fail validation.
        """
        layered: dict[str, Any] = {}
        for loader in loaders or ():
            try:
                layered.update(loader.read(settings_cls))
            except ConfigError as exc:
                _log.warning(
                    "listing.config.loader_skipped",
                    loader=type(loader).__name__,
                    **exc.log_fields(),
                )
        layered.update(overrides or {})
        return build_settings(settings_cls, layered)


__all__ = ["SettingsFactory"]
