"""Config settings – SettingsLoader, EnvSettingsLoader, DotenvSettingsLoader."""
from __future__ import annotations

import abc
import dataclasses
import os
from typing import Any, Callable, Mapping, TypeVar

from dotenv import dotenv_values

from listing_planner.config.settings.base import Settings
from listing_planner.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
    env_key_for,
)

T = TypeVar("T", bound=Settings)

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def _parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"expected one of {sorted(_TRUE | _FALSE)}")


_COERCERS: dict[str, Callable[[str], Any]] = {
    "bool": _parse_bool,
    "int": int,
    "float": float,
    "str": str,
}


def _type_name(type_hint: Any) -> str:
    # string annotations under ``from __future__ import annotations``
    return type_hint if isinstance(type_hint, str) else getattr(type_hint, "__name__", "str")


def build_settings(settings_class: type[T], values: Mapping[str, Any]) -> T:
    """Construct *settings_class* from explicitly supplied *values*.

    Validation failures are re-raised naming the ``LISTING_*`` variable that
    controls the rejected field.
    """
    prefix = settings_class._prefix
    for field in dataclasses.fields(settings_class):  # type: ignore[arg-type]
        if (
            field.name not in values
            and field.default is dataclasses.MISSING
            and field.default_factory is dataclasses.MISSING  # type: ignore[misc]
        ):
            raise MissingRequiredSettingError(field.name, env_key=env_key_for(prefix, field.name))
    try:
        return settings_class(**values)
    except InvalidSettingValueError as exc:
        raise exc.from_source(env_key_for(prefix, exc.setting)) from exc
    except TypeError as exc:
        raise ConfigError(f"Cannot build {settings_class.__name__}: {exc}", cause=exc) from exc


class SettingsLoader(abc.ABC):
    """Port: one configuration source."""

    @abc.abstractmethod
    def read(self, settings_class: type[Settings]) -> dict[str, Any]:
        """Return only the fields this source supplies, coerced to their types."""

    def load(self, settings_class: type[T]) -> T:
        return build_settings(settings_class, self.read(settings_class))


class EnvSettingsLoader(SettingsLoader):
    """Read ``{PREFIX}_{FIELD}`` variables, e.g. ``LISTING_MAX_PAGE_SIZE=40``.

    *environ* defaults to ``os.environ`` at read time.  Unset variables are
    not reported, so the field keeps its default.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ

    def read(self, settings_class: type[Settings]) -> dict[str, Any]:
        environ = os.environ if self._environ is None else self._environ
        prefix = settings_class._prefix
        values: dict[str, Any] = {}
        for field in dataclasses.fields(settings_class):  # type: ignore[arg-type]
            env_key = env_key_for(prefix, field.name)
            raw = environ.get(env_key)
            if raw is None:
                continue
            coerce = _COERCERS.get(_type_name(field.type), str)
            try:
                values[field.name] = coerce(raw)
            except ValueError as exc:
                raise InvalidSettingValueError(field.name, raw, str(exc), env_key=env_key) from exc
        return values


class DotenvSettingsLoader(SettingsLoader):
    """Read a ``.env`` file layered with the process environment.

    The process environment wins unless *override* is set.  The file is
    parsed with ``dotenv_values``, so ``os.environ`` is never modified.
    """

    def __init__(
        self,
        env_file: str = ".env",
        override: bool = False,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._env_file = env_file
        self._override = override
        self._environ = environ

    def read(self, settings_class: type[Settings]) -> dict[str, Any]:
        from_file = {k: v for k, v in dotenv_values(self._env_file).items() if v is not None}
        process = dict(os.environ if self._environ is None else self._environ)
        layered = {**process, **from_file} if self._override else {**from_file, **process}
        return EnvSettingsLoader(layered).read(settings_class)


__all__ = ["DotenvSettingsLoader", "EnvSettingsLoader", "SettingsLoader", "build_settings"]
