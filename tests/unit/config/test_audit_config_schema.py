"""
settings-audit — unit tests for config schema validation

File: tests/unit/config/test_audit_config_schema.py
Last updated: 2026-10-17

Purpose
- Validate strict schema checks, migration guidance, merging and redacted dumps.
"""

from __future__ import annotations

import pytest

from settings_audit.config import (
    ConfigValidationError,
    assert_valid_config,
    default_config,
    dump_redacted,
    merge_config,
    validate_config,
)
from settings_audit.config.schema import migration_guidance
from settings_audit.security import REDACTED_VALUE


@pytest.mark.unit
def test_default_config_is_valid_and_isolated() -> None:
    first = default_config()
    first["audit"]["fail_on"] = "INFO"

    assert assert_valid_config(default_config())["audit"]["fail_on"] == "WARN"


@pytest.mark.unit
def test_validation_reports_deterministic_paths() -> None:
    config = merge_config(
        default_config(),
        {
            "audit": {"fail_on": "LOUD", "colour": "blue"},
            "observability": {"redact_secrets": "yes"},
            "extra": {},
        },
    )

    result = validate_config(config)

    assert not result.is_valid
    assert [(issue.path, issue.message) for issue in result.issues] == [
        ("extra", "unknown field"),
        ("audit.colour", "unknown field"),
        ("audit.fail_on", "invalid value 'LOUD'; expected one of: INFO, SEVERE, WARN, never"),
        ("observability.redact_secrets", "expected boolean, got str"),
    ]


@pytest.mark.unit
def test_missing_sections_and_non_mapping_root() -> None:
    assert [issue.path for issue in validate_config({}).issues] == [
        "audit",
        "meta",
        "observability",
    ]
    assert [issue.message for issue in validate_config([]).issues] == [
        "expected object, got list"
    ]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("version", "fragment"),
    [(0, "must be >= 1"), (2, "newer than supported 1")],
)
def test_schema_version_mismatch(version: int, fragment: str) -> None:
    config = merge_config(default_config(), {"meta": {"schema_version": version}})

    with pytest.raises(ConfigValidationError, match=fragment):
        assert_valid_config(config)


@pytest.mark.unit
def test_migration_guidance_messages() -> None:
    assert migration_guidance(1) == "schema version is current"
    assert "older than supported" in migration_guidance(0)


@pytest.mark.unit
def test_merge_config_is_deep_and_non_mutating() -> None:
    base = {"a": {"b": 1, "c": [1]}}

    merged = merge_config(base, {"a": {"c": [2]}, "d": 3})

    assert merged == {"a": {"b": 1, "c": [2]}, "d": 3}
    assert base == {"a": {"b": 1, "c": [1]}}


@pytest.mark.unit
def test_dump_redacted_masks_credentials() -> None:
    dumped = dump_redacted({"audit": {"proxy_password": "hunter2", "fail_on": "WARN"}})

    assert dumped == {"audit": {"fail_on": "WARN", "proxy_password": REDACTED_VALUE}}
    assert dump_redacted("not a mapping") == {}
