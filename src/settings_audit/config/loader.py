"""
settings-audit — runtime config and snapshot loader.

File: src/settings_audit/config/loader.py
Last updated: 2026-10-17

Purpose
- Load effective tool config from defaults, TOML file, env vars, and CLI overrides.
- Load configuration snapshots (the documents being audited) from TOML files.

What should be included in this file
- Precedence logic: CLI > env (SETTINGS_AUDIT_) > file > defaults.
- TOML loading via ``tomllib``.
- Explicit environment variable table with boolean coercion.
- Path normalization relative to config file location.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from settings_audit.config.schema import (
    PATH_FIELDS,
    assert_valid_config,
    default_config,
    dump_redacted,
    merge_config,
)
from settings_audit.snapshot import StoredConfiguration

DEFAULT_CONFIG_FILE: Final[str] = "settings-audit.toml"
ENV_PREFIX: Final[str] = "SETTINGS_AUDIT_"

# Settings an operator may override from the environment; ``meta`` is file-only.
ENV_OVERRIDE_PATHS: Final[tuple[tuple[str, str], ...]] = (
    ("audit", "default_locale"),
    ("audit", "fail_on"),
    ("audit", "snapshot_path"),
    ("observability", "log_format"),
    ("observability", "log_level"),
    ("observability", "redact_secrets"),
)
_BOOLEAN_PATHS: Final[frozenset[tuple[str, str]]] = frozenset(
    {("observability", "redact_secrets")}
)
_BOOLEAN_WORDS: Final[Mapping[str, bool]] = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}


class ConfigLoadError(ValueError):
    """Raised when config cannot be loaded or overrides cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Load effective config with deterministic precedence: CLI > env > file > defaults."""

    resolved_path = _resolve_config_path(config_path)
    file_payload = _load_toml_file(resolved_path, required=config_path is not None)
    merged = assert_valid_config(merge_config(default_config(), file_payload))

    merged = merge_config(merged, env_overrides(os.environ if environ is None else environ))
    merged = merge_config(merged, _materialize_cli_overrides(cli_overrides or {}))
    return assert_valid_config(normalize_paths(merged, base_dir=resolved_path.parent))


def env_name(section: str, key: str) -> str:
    return f"{ENV_PREFIX}{section.upper()}_{key.upper()}"


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Nested overrides for every ``SETTINGS_AUDIT_<SECTION>_<KEY>`` variable present."""

    overrides: dict[str, Any] = {}
    for section, key in ENV_OVERRIDE_PATHS:
        name = env_name(section, key)
        raw = environ.get(name)
        if raw is None:
            continue
        value: object = raw.strip()
        if (section, key) in _BOOLEAN_PATHS:
            value = _BOOLEAN_WORDS.get(raw.strip().lower())
            if value is None:
                raise ConfigLoadError(f"{name} must be a boolean (true/false/1/0/yes/no/on/off)")
        overrides.setdefault(section, {})[key] = value
    return overrides


def normalize_paths(config: Mapping[str, object], *, base_dir: Path) -> dict[str, Any]:
    """Resolve relative path fields against ``base_dir``."""

    materialized = merge_config({}, config)
    for section, key in PATH_FIELDS:
        payload = materialized.get(section)
        if isinstance(payload, dict) and isinstance(payload.get(key), str):
            payload[key] = _absolute_posix(payload[key], base_dir)
    return materialized


def dump_effective_config(config: Mapping[str, object]) -> str:
    """Deterministic JSON dump of the redacted effective config."""

    return json.dumps(dump_redacted(config), sort_keys=True, indent=2, ensure_ascii=False)


def load_snapshot(path: str | Path) -> StoredConfiguration:
    """Read a configuration snapshot document from a TOML file."""

    resolved = Path(path).expanduser().resolve()
    payload = _load_toml_file(resolved, required=True)
    try:
        return StoredConfiguration.from_mapping(payload)
    except ValueError as exc:
        raise ConfigLoadError(f"invalid snapshot {resolved}: {exc}") from exc


def _resolve_config_path(config_path: str | Path | None) -> Path:
    if config_path is None:
        return (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    return Path(config_path).expanduser().resolve()


def _load_toml_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"file not found: {path}")
        return {}

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read {path}: {exc}") from exc


def _materialize_cli_overrides(cli_overrides: Mapping[str, object]) -> dict[str, Any]:
    """Turn dotted ``section.key`` overrides into a nested mapping; ``None`` means unset."""

    payload: dict[str, Any] = {}
    for dotted, value in cli_overrides.items():
        if value is None:
            continue
        section, _, key = dotted.partition(".")
        if not section or not key or "." in key:
            raise ConfigLoadError(f"invalid CLI override key {dotted!r}")
        payload.setdefault(section, {})[key] = value
    return payload


def _absolute_posix(raw: str, base_dir: Path) -> str:
    candidate = Path(os.path.expandvars(raw)).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return Path(os.path.normpath(candidate)).as_posix()


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_OVERRIDE_PATHS",
    "ENV_PREFIX",
    "dump_effective_config",
    "env_name",
    "env_overrides",
    "load_config",
    "load_snapshot",
    "normalize_paths",
]
