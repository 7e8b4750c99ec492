"""
settings-audit — health message catalog

File: src/settings_audit/health/messages.py
Last updated: 2026-10-17

Purpose
- Resolve finding message keys into localized text.

Bundle format
- One YAML mapping of ``key: text`` per locale, packaged as
  ``settings_audit/health/locales/<locale>.yaml``.
- Text uses positional ``{0}``, ``{1}`` placeholders.

Functional requirements
- Locale resolution: exact locale (``de_DE``), then language (``de``), then the
  default locale. A key missing from every candidate bundle renders as the key.
- Placeholders without a matching parameter are left untouched.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable, Mapping
from importlib import resources
from pathlib import Path
from typing import Final, NoReturn, cast

import yaml

from settings_audit.constants import DEFAULT_LOCALE

SEPARATOR_KEY: Final[str] = "display.separator"
_FALLBACK_SEPARATOR: Final[str] = " > "
_BUNDLE_SUFFIX: Final[str] = ".yaml"
_PLACEHOLDER = re.compile(r"\{(\d+)\}")


class MessageCatalogError(ValueError):
    """Raised when a message bundle cannot be loaded."""


class MessageCatalog:
    """Locale-aware lookup over immutable message bundles."""

    def __init__(
        self,
        bundles: Mapping[str, Mapping[str, str]],
        *,
        default_locale: str = DEFAULT_LOCALE,
    ) -> None:
        self._bundles: dict[str, dict[str, str]] = {
            normalize_locale(locale): dict(messages) for locale, messages in bundles.items()
        }
        self._default_locale = normalize_locale(default_locale)

    @classmethod
    def from_directory(
        cls, directory: str | Path, *, default_locale: str = DEFAULT_LOCALE
    ) -> MessageCatalog:
        root = Path(directory)
        if not root.is_dir():
            _fail(str(root), "message directory does not exist")
        bundles = {
            path.stem: _load_bundle(path.read_text(encoding="utf-8"), source=str(path))
            for path in sorted(root.glob(f"*{_BUNDLE_SUFFIX}"))
        }
        return cls(bundles, default_locale=default_locale)

    @classmethod
    def default(cls, *, default_locale: str = DEFAULT_LOCALE) -> MessageCatalog:
        """Catalog backed by the bundles shipped with the package."""

        package_root = resources.files("settings_audit.health").joinpath("locales")
        bundles: dict[str, dict[str, str]] = {}
        for entry in sorted(package_root.iterdir(), key=lambda item: item.name):
            if not entry.name.endswith(_BUNDLE_SUFFIX):
                continue
            locale = entry.name[: -len(_BUNDLE_SUFFIX)]
            bundles[locale] = _load_bundle(entry.read_text(encoding="utf-8"), source=entry.name)
        return cls(bundles, default_locale=default_locale)

    @property
    def default_locale(self) -> str:
        return self._default_locale

    def locales(self) -> tuple[str, ...]:
        return tuple(sorted(self._bundles))

    def candidates(self, locale: str | None) -> tuple[str, ...]:
        """Bundle lookup order for ``locale``."""

        ordered: list[str] = []
        if locale:
            normalized = normalize_locale(locale)
            ordered.append(normalized)
            language = normalized.split("_", 1)[0]
            if language != normalized:
                ordered.append(language)
        if self._default_locale not in ordered:
            ordered.append(self._default_locale)
        return tuple(ordered)

    def lookup(self, key: str, locale: str | None = None) -> str | None:
        for candidate in self.candidates(locale):
            bundle = self._bundles.get(candidate)
            if bundle is not None and key in bundle:
                return bundle[key]
        return None

    def text(self, key: str, locale: str | None = None) -> str:
        found = self.lookup(key, locale)
        return key if found is None else found

    def format(
        self,
        key: str,
        parameters: Iterable[object] = (),
        *,
        locale: str | None = None,
    ) -> str:
        return substitute(self.text(key, locale), parameters)

    def separator(self, locale: str | None = None) -> str:
        found = self.lookup(SEPARATOR_KEY, locale)
        return _FALLBACK_SEPARATOR if found is None else found


@functools.lru_cache(maxsize=1)
def default_catalog() -> MessageCatalog:
    """Shared catalog over the packaged bundles; bundles are read once."""

    return MessageCatalog.default()


def substitute(template: str, parameters: Iterable[object]) -> str:
    """Replace ``{n}`` placeholders with positional parameters."""

    values = [str(item) for item in parameters]

    def _replace(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if index < len(values):
            return values[index]
        return match.group(0)

    return _PLACEHOLDER.sub(_replace, template)


def normalize_locale(locale: str) -> str:
    return locale.strip().replace("-", "_")


def _load_bundle(text: str, *, source: str) -> dict[str, str]:
    try:
        loaded = cast("object", yaml.safe_load(text))
    except yaml.YAMLError as exc:
        _fail(source, f"invalid YAML: {exc}")
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        _fail(source, "bundle must be a mapping of message keys to text")
    bundle: dict[str, str] = {}
    for key, value in loaded.items():
        if not isinstance(key, str) or not isinstance(value, str):
            _fail(source, f"entry {key!r} must map a string key to string text")
        bundle[key] = value
    return bundle


def _fail(source: str, message: str) -> NoReturn:
    raise MessageCatalogError(f"{source}: {message}")


__all__ = [
    "SEPARATOR_KEY",
    "MessageCatalog",
    "MessageCatalogError",
    "default_catalog",
    "normalize_locale",
    "substitute",
]
