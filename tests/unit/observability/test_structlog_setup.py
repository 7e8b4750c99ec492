"""
settings-audit — unit tests for structured logging setup

File: tests/unit/observability/test_structlog_setup.py
Last updated: 2026-10-17

Purpose
- Validate JSON and console rendering, level filtering, redaction and correlation fields.

What this test file should cover
- JSON line validity and redaction guarantees.
- Correlation field propagation through ``correlation_scope``.
- Configuration from the ``[observability]`` section.

Non-functional requirements
- Deterministic; structlog defaults are restored after each test.
"""

from __future__ import annotations

import io
import json
from collections.abc import Iterator

import pytest
import structlog

from settings_audit.config import default_config
from settings_audit.observability import (
    configure_from_config,
    configure_logging,
    correlation_scope,
    redact_event,
)
from settings_audit.security import REDACTED_VALUE


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


def _json_lines(stream: io.StringIO) -> list[dict[str, object]]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


@pytest.mark.unit
def test_json_logging_redacts_secrets_and_keeps_correlation_fields() -> None:
    stream = io.StringIO()
    configure_logging("INFO", "json", stream=stream)
    logger = structlog.get_logger("settings_audit.tests")

    with correlation_scope(snapshot="snap.toml", locale=None):
        logger.info("bind attempt password=hunter22", proxy_password="hunter2", host="dir")

    (entry,) = _json_lines(stream)
    assert entry["event"] == f"bind attempt password={REDACTED_VALUE}"
    assert entry["proxy_password"] == REDACTED_VALUE
    assert entry["host"] == "dir"
    assert entry["snapshot"] == "snap.toml"
    assert "locale" not in entry
    assert entry["level"] == "info"
    assert "timestamp" in entry


@pytest.mark.unit
def test_level_filtering_drops_lower_events() -> None:
    stream = io.StringIO()
    configure_logging("WARNING", "json", stream=stream)
    logger = structlog.get_logger("settings_audit.tests")

    logger.info("dropped")
    logger.warning("kept")

    assert [entry["event"] for entry in _json_lines(stream)] == ["kept"]


@pytest.mark.unit
def test_redaction_can_be_disabled() -> None:
    stream = io.StringIO()
    configure_logging("INFO", "json", redact_secrets=False, stream=stream)

    structlog.get_logger("settings_audit.tests").info("event", password="visible")

    assert _json_lines(stream)[0]["password"] == "visible"


@pytest.mark.unit
def test_text_format_renders_plain_console_lines() -> None:
    stream = io.StringIO()
    configure_logging("INFO", "text", stream=stream)

    structlog.get_logger("settings_audit.tests").info("audit_completed", findings=2)

    output = stream.getvalue()
    assert "audit_completed" in output
    assert "findings=2" in output
    assert "\x1b[" not in output


@pytest.mark.unit
@pytest.mark.parametrize(
    ("level", "fmt", "reason"),
    [("LOUD", "json", "unsupported logging level"), ("INFO", "xml", "unsupported log format")],
)
def test_invalid_settings_are_rejected(level: str, fmt: str, reason: str) -> None:
    with pytest.raises(ValueError, match=reason):
        configure_logging(level, fmt)


@pytest.mark.unit
def test_configure_from_config_uses_observability_section(
    capsys: pytest.CaptureFixture[str],
) -> None:
    config = default_config()
    config["observability"]["log_level"] = "ERROR"
    config["observability"]["log_format"] = "json"

    configure_from_config(config)
    logger = structlog.get_logger("settings_audit.tests")
    logger.warning("quiet")
    logger.error("loud")

    lines = capsys.readouterr().err.splitlines()
    assert [json.loads(line)["event"] for line in lines] == ["loud"]


@pytest.mark.unit
def test_redact_event_processor_masks_nested_fields() -> None:
    event = redact_event(None, "info", {"event": "x", "ldap": {"bind_password": "pw"}})

    assert event == {"event": "x", "ldap": {"bind_password": REDACTED_VALUE}}
