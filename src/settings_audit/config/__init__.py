"""
settings-audit config package public API.

File: src/settings_audit/config/__init__.py
Last updated: 2026-10-17

Purpose
- Export config loading/validation entrypoints and public error types.

Functional requirements
- Support loading from ``settings-audit.toml`` + ``SETTINGS_AUDIT_`` env overrides.
- Fail fast with clear structured validation/load errors.
"""

from settings_audit.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_OVERRIDE_PATHS,
    ENV_PREFIX,
    ConfigLoadError,
    dump_effective_config,
    env_name,
    env_overrides,
    load_config,
    load_snapshot,
    normalize_paths,
)
from settings_audit.config.schema import (
    DEFAULT_CONFIG,
    FAIL_ON_VALUES,
    PATH_FIELDS,
    ConfigSchemaVersion,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    SettingsAuditConfig,
    assert_valid_config,
    default_config,
    dump_redacted,
    merge_config,
    migration_guidance,
    validate_config,
)

__all__ = [
    "ConfigLoadError",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_OVERRIDE_PATHS",
    "ENV_PREFIX",
    "FAIL_ON_VALUES",
    "PATH_FIELDS",
    "SettingsAuditConfig",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "dump_redacted",
    "env_name",
    "env_overrides",
    "load_config",
    "load_snapshot",
    "merge_config",
    "migration_guidance",
    "normalize_paths",
    "validate_config",
]
