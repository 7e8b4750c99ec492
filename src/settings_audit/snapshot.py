"""
settings-audit — configuration snapshot contract

File: src/settings_audit/snapshot.py
Last updated: 2026-10-17

Purpose
- Define the read-only view of the host server's configuration that rules audit,
  and ship an in-memory implementation built from a plain mapping.

Document layout (``StoredConfiguration.from_mapping``)
- ``settings``: flat map of setting key -> value.
- ``app_properties``: flat map of application property -> string.
- ``profiles.<category>.<profile id>``: flat map of setting key -> value, in
  declaration order.

Functional requirements
- Pure reads: nothing here mutates after construction.
- Unknown keys fall back to the setting default; wrongly typed values raise
  ``SettingTypeError`` at read time so the engine can isolate the failure.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Final, NoReturn, Protocol, runtime_checkable

from settings_audit.settings import ProfileCategory, Setting

_APP_PROPERTY_DEFAULTS: Final[Mapping[str, str]] = MappingProxyType(
    {"ldap.promiscuousEnable": "false"}
)
_TRUE_STRINGS: Final[frozenset[str]] = frozenset({"true", "yes", "on", "1"})
_FALSE_STRINGS: Final[frozenset[str]] = frozenset({"false", "no", "off", "0", ""})


class SettingTypeError(ValueError):
    """Raised when a stored setting value does not match the setting's syntax."""

    def __init__(self, key: str, expected: str, actual: object) -> None:
        self.key = key
        self.expected = expected
        super().__init__(f"setting {key!r}: expected {expected}, got {type(actual).__name__}")


class ApplicationMode(StrEnum):
    """Run mode of the host application."""

    NEW = "NEW"
    CONFIGURATION = "CONFIGURATION"
    RUNNING = "RUNNING"


@runtime_checkable
class SettingsProfile(Protocol):
    """Named group of per-profile settings (directory, password policy, ...)."""

    @property
    def identifier(self) -> str: ...

    def read_string(self, setting: Setting) -> str: ...

    def read_string_list(self, setting: Setting) -> tuple[str, ...]: ...

    def read_password(self, setting: Setting) -> str | None: ...

    def read_int(self, setting: Setting) -> int: ...


@runtime_checkable
class ConfigurationSnapshot(Protocol):
    """Read-only configuration view consumed by diagnostic rules."""

    def read_boolean(self, setting: Setting) -> bool: ...

    def read_string(self, setting: Setting) -> str: ...

    def read_string_list(self, setting: Setting) -> tuple[str, ...]: ...

    def read_password(self, setting: Setting) -> str | None: ...

    def enumerate_profiles(self, category: ProfileCategory) -> Sequence[SettingsProfile]: ...

    def default_value(self, setting: Setting) -> object: ...

    def read_app_property(self, key: str) -> str | None: ...


@dataclass(frozen=True, slots=True)
class StoredProfile:
    """In-memory ``SettingsProfile``."""

    identifier: str
    values: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def read_string(self, setting: Setting) -> str:
        return _as_string(setting, self.values.get(setting.key, setting.default))

    def read_string_list(self, setting: Setting) -> tuple[str, ...]:
        return _as_string_list(setting, self.values.get(setting.key, setting.default))

    def read_password(self, setting: Setting) -> str | None:
        return _as_password(setting, self.values.get(setting.key, setting.default))

    def read_int(self, setting: Setting) -> int:
        return _as_int(setting, self.values.get(setting.key, setting.default))


@dataclass(frozen=True, slots=True)
class StoredConfiguration:
    """Immutable in-memory ``ConfigurationSnapshot``."""

    settings: Mapping[str, object] = field(default_factory=dict)
    app_properties: Mapping[str, str] = field(default_factory=dict)
    profiles: Mapping[str, tuple[StoredProfile, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "settings", MappingProxyType(dict(self.settings)))
        object.__setattr__(self, "app_properties", MappingProxyType(dict(self.app_properties)))
        object.__setattr__(
            self,
            "profiles",
            MappingProxyType({key: tuple(value) for key, value in self.profiles.items()}),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> StoredConfiguration:
        """Build a snapshot from a parsed document (see module docstring)."""

        if not isinstance(data, Mapping):
            _shape_fail("$", "expected a table")
        unknown = sorted(set(data) - {"settings", "app_properties", "profiles"})
        if unknown:
            _shape_fail("$", f"unknown keys: {', '.join(unknown)}")

        settings = _table(data.get("settings"), "settings")
        app_properties: dict[str, str] = {}
        for key, value in _table(data.get("app_properties"), "app_properties").items():
            app_properties[key] = value if isinstance(value, str) else _property_text(value)

        profiles: dict[str, tuple[StoredProfile, ...]] = {}
        for category, raw_profiles in _table(data.get("profiles"), "profiles").items():
            try:
                ProfileCategory(category)
            except ValueError:
                allowed = ", ".join(item.value for item in ProfileCategory)
                _shape_fail(f"profiles.{category}", f"unknown category; expected one of: {allowed}")
            by_id = _table(raw_profiles, f"profiles.{category}")
            profiles[category] = tuple(
                StoredProfile(
                    identifier=profile_id,
                    values=_table(values, f"profiles.{category}.{profile_id}"),
                )
                for profile_id, values in by_id.items()
            )

        return cls(settings=settings, app_properties=app_properties, profiles=profiles)

    def read_boolean(self, setting: Setting) -> bool:
        raw = self.settings.get(setting.key, setting.default)
        if isinstance(raw, bool):
            return raw
        if raw is None:
            return False
        if isinstance(raw, str):
            folded = raw.strip().lower()
            if folded in _TRUE_STRINGS:
                return True
            if folded in _FALSE_STRINGS:
                return False
        raise SettingTypeError(setting.key, "boolean", raw)

    def read_string(self, setting: Setting) -> str:
        return _as_string(setting, self.settings.get(setting.key, setting.default))

    def read_string_list(self, setting: Setting) -> tuple[str, ...]:
        return _as_string_list(setting, self.settings.get(setting.key, setting.default))

    def read_password(self, setting: Setting) -> str | None:
        return _as_password(setting, self.settings.get(setting.key, setting.default))

    def enumerate_profiles(self, category: ProfileCategory) -> tuple[StoredProfile, ...]:
        return self.profiles.get(category.value, ())

    def default_value(self, setting: Setting) -> object:
        return setting.default

    def read_app_property(self, key: str) -> str | None:
        if key in self.app_properties:
            return self.app_properties[key]
        return _APP_PROPERTY_DEFAULTS.get(key)

    def to_dict(self) -> dict[str, object]:
        """Plain nested mapping; inverse of ``from_mapping``."""

        return {
            "settings": dict(self.settings),
            "app_properties": dict(self.app_properties),
            "profiles": {
                category: {profile.identifier: dict(profile.values) for profile in items}
                for category, items in self.profiles.items()
            },
        }


def _as_string(setting: Setting, raw: object) -> str:
    if raw is None:
        return ""
    if not isinstance(raw, str):
        raise SettingTypeError(setting.key, "string", raw)
    return raw


def _as_string_list(setting: Setting, raw: object) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        return (raw,)
    if not isinstance(raw, Sequence):
        raise SettingTypeError(setting.key, "list of strings", raw)
    for item in raw:
        if not isinstance(item, str):
            raise SettingTypeError(setting.key, "list of strings", item)
    return tuple(raw)


def _as_password(setting: Setting, raw: object) -> str | None:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise SettingTypeError(setting.key, "password string", raw)
    return raw


def _as_int(setting: Setting, raw: object) -> int:
    if raw is None:
        return 0
    if isinstance(raw, bool):
        raise SettingTypeError(setting.key, "integer", raw)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            raise SettingTypeError(setting.key, "integer", raw) from None
    raise SettingTypeError(setting.key, "integer", raw)


def _table(raw: object, path: str) -> dict[str, object]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        _shape_fail(path, "expected a table")
    return {str(key): value for key, value in raw.items()}


def _property_text(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _shape_fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"snapshot {path}: {message}")


__all__ = [
    "ApplicationMode",
    "ConfigurationSnapshot",
    "SettingTypeError",
    "SettingsProfile",
    "StoredConfiguration",
    "StoredProfile",
]
