"""
settings-audit — unit tests for the diagnostic engine

File: tests/unit/health/test_diagnostic_engine.py
Last updated: 2026-10-17

Purpose
- Validate built-in checks, rule isolation and application-level auditing.

What this test file should cover
- Global suppression through the hide-warnings setting.
- Per-rule error boundaries: a failing rule is logged and skipped.
- Weak password threshold, directory URL security and parse errors.
- Configuration mode and new-user policy findings.

Non-functional requirements
- Offline; collaborators are fakes.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pytest
from structlog.testing import capture_logs

from settings_audit.health import (
    DiagnosticEngine,
    DiagnosticRecord,
    HealthMessage,
    Severity,
    UrlSyntaxError,
    parse_directory_url,
)
from settings_audit.snapshot import ApplicationMode, ConfigurationSnapshot, StoredConfiguration

_STRONG_PASSWORD = "Xk#9mQ!v7Lp@2wZr"


def _snapshot(
    *,
    settings: Mapping[str, object] | None = None,
    ldap: Mapping[str, object] | None = None,
    app_properties: Mapping[str, object] | None = None,
    extra_profiles: Mapping[str, object] | None = None,
) -> StoredConfiguration:
    """A snapshot that produces no findings unless a test overrides something."""

    ldap_profile: dict[str, object] = {
        "ldap.serverUrls": ["ldaps://dir.example.com:636"],
        "ldap.testuser.username": "cn=health,ou=test",
        "ldap.proxy.password": _STRONG_PASSWORD,
        "challenge.userAttribute": "pwmResponseSet",
    }
    ldap_profile.update(ldap or {})
    profiles: dict[str, object] = {"ldap": {"default": ldap_profile}}
    profiles.update(extra_profiles or {})
    return StoredConfiguration.from_mapping(
        {
            "settings": {"pwm.selfURL": "https://sso.example.com/pwm", **(settings or {})},
            "app_properties": dict(app_properties or {}),
            "profiles": profiles,
        }
    )


class _FixedScorer:
    def __init__(self, value: int) -> None:
        self.value = value
        self.scored: list[str | None] = []

    def score(self, password: str | None) -> int:
        self.scored.append(password)
        return self.value


class _StaticRule:
    def __init__(self, rule_id: str, *records: DiagnosticRecord) -> None:
        self.rule_id = rule_id
        self._records = records

    def audit(
        self, snapshot: ConfigurationSnapshot, locale: str | None
    ) -> Sequence[DiagnosticRecord]:
        return list(self._records)


class _ExplodingRule:
    rule_id = "exploding"

    def audit(
        self, snapshot: ConfigurationSnapshot, locale: str | None
    ) -> Sequence[DiagnosticRecord]:
        raise RuntimeError("directory unreachable")


class _RecordingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def warning(self, event: str, **fields: Any) -> None:
        self.events.append((event, fields))


def _keys(records: Sequence[DiagnosticRecord]) -> list[str]:
    return [record.message_key for record in records]


@pytest.mark.unit
def test_baseline_snapshot_produces_no_findings() -> None:
    assert DiagnosticEngine().audit(_snapshot()) == []


@pytest.mark.unit
def test_hidden_warnings_suppress_everything() -> None:
    snapshot = _snapshot(
        settings={
            "display.hideConfigHealthWarnings": True,
            "pwm.selfURL": "",
            "ldap.wireTrace.enable": True,
        },
        ldap={"ldap.serverUrls": ["ldap://dir"], "ldap.proxy.password": "x"},
    )

    assert DiagnosticEngine().audit(snapshot) == []
    assert DiagnosticEngine().audit(None) == []


@pytest.mark.unit
def test_failing_rule_is_isolated_and_logged() -> None:
    first = DiagnosticRecord.for_message(HealthMessage.MISSING_DB, "one")
    third = DiagnosticRecord.for_message(HealthMessage.MISSING_DB, "three")
    logger = _RecordingLogger()
    engine = DiagnosticEngine(
        rules=[_StaticRule("first", first), _ExplodingRule(), _StaticRule("third", third)],
        logger=logger,
    )

    records = engine.audit(_snapshot())

    assert records == [first, third]
    assert logger.events == [
        (
            "health_rule_failed",
            {
                "rule_id": "exploding",
                "error": "directory unreachable",
                "error_type": "RuntimeError",
            },
        )
    ]


@pytest.mark.unit
def test_rule_failure_reaches_structlog_by_default() -> None:
    engine = DiagnosticEngine(rules=[_ExplodingRule()])

    with capture_logs() as logs:
        assert engine.audit(_snapshot()) == []

    assert [entry["event"] for entry in logs] == ["health_rule_failed"]
    assert logs[0]["rule_id"] == "exploding"
    assert logs[0]["log_level"] == "warning"


@pytest.mark.unit
def test_builtin_checks_run_before_rules() -> None:
    tail = DiagnosticRecord.for_message(HealthMessage.MISSING_DB, "rule")
    engine = DiagnosticEngine(rules=[_StaticRule("tail", tail)])

    records = engine.audit(_snapshot(settings={"ldap.wireTrace.enable": True}))

    assert _keys(records) == ["health.config.ldapWireTrace", "health.config.missingDB"]


@pytest.mark.unit
@pytest.mark.parametrize(("score", "expected"), [(49, 1), (50, 0), (0, 1), (100, 0)])
def test_weak_password_threshold(score: int, expected: int) -> None:
    scorer = _FixedScorer(score)
    engine = DiagnosticEngine(rules=[], scorer=scorer)

    records = engine.audit(_snapshot())

    weak = [r for r in records if r.message_key == HealthMessage.WEAK_PASSWORD.key]
    assert len(weak) == expected
    assert scorer.scored == [_STRONG_PASSWORD]
    if expected:
        assert weak[0].severity is Severity.WARN
        assert weak[0].parameters[1] == str(score)
        assert "default" in weak[0].parameters[0]


@pytest.mark.unit
def test_default_valued_service_passwords_are_not_scored() -> None:
    scorer = _FixedScorer(10)
    engine = DiagnosticEngine(rules=[], scorer=scorer)

    engine.audit(_snapshot(settings={"email.smtp.password": "changeme"}))

    assert scorer.scored == ["changeme", _STRONG_PASSWORD]


@pytest.mark.unit
def test_scorer_failure_skips_only_that_password() -> None:
    class _PickyScorer:
        def score(self, password: str | None) -> int:
            if password == "boom":
                raise ValueError("cannot score")
            return 10

    logger = _RecordingLogger()
    engine = DiagnosticEngine(rules=[], scorer=_PickyScorer(), logger=logger)

    records = engine.audit(_snapshot(settings={"db.connection.password": "boom"}))

    assert _keys(records) == ["health.config.weakPassword"]
    assert [event for event, _ in logger.events] == ["password_score_failed"]


@pytest.mark.unit
def test_directory_url_security_findings() -> None:
    engine = DiagnosticEngine(rules=[])
    snapshot = _snapshot(
        ldap={"ldap.serverUrls": ["ldap://host", "ldaps://host", "LDAPS://other", "not a url"]}
    )

    records = engine.audit(snapshot)

    assert _keys(records) == ["health.config.ldapUnsecure", "health.config.parseError"]
    unsecure, parse_error = records
    assert unsecure.parameters[1] == "ldap://host"
    assert "not a url" in parse_error.parameters
    assert parse_error.parameters[0] == "url contains whitespace or control characters"


@pytest.mark.unit
def test_single_setting_checks() -> None:
    engine = DiagnosticEngine(rules=[])
    snapshot = _snapshot(
        settings={
            "pwm.selfURL": "http://localhost:8080/pwm",
            "ldap.wireTrace.enable": "true",
            "display.showDetailedErrors": True,
        },
        app_properties={"ldap.promiscuousEnable": "TRUE"},
        ldap={"ldap.testuser.username": "  "},
    )

    records = engine.audit(snapshot, "en")

    assert _keys(records) == [
        "health.config.noSiteURL",
        "health.config.ldapWireTrace",
        "health.config.promiscuousLDAP",
        "health.config.showDetailedErrors",
        "health.config.addTestUser",
    ]
    assert records[2].parameters == ("AppProperty ⇨ ldap.promiscuousEnable",)
    assert records[4].parameters == (
        "Settings ⇨ LDAP ⇨ LDAP Directories ⇨ Connection ⇨ default ⇨ LDAP Test User",
    )


@pytest.mark.unit
def test_unreadable_hide_flag_does_not_suppress() -> None:
    logger = _RecordingLogger()
    engine = DiagnosticEngine(rules=[], logger=logger)
    snapshot = _snapshot(
        settings={"display.hideConfigHealthWarnings": "maybe", "ldap.wireTrace.enable": True}
    )

    records = engine.audit(snapshot)

    assert _keys(records) == ["health.config.ldapWireTrace"]
    assert logger.events[0][0] == "health_setting_unreadable"


@pytest.mark.unit
def test_records_carry_requested_locale() -> None:
    engine = DiagnosticEngine(rules=[])

    records = engine.audit(_snapshot(settings={"ldap.wireTrace.enable": True}), "de_DE")

    assert records[0].locale == "de_DE"
    assert "ist aktiviert" in records[0].render(engine.catalog)


@pytest.mark.unit
def test_configuration_mode_is_reported_first() -> None:
    engine = DiagnosticEngine(rules=[])

    records = engine.audit_application(
        _snapshot(settings={"ldap.wireTrace.enable": True}), ApplicationMode.CONFIGURATION
    )

    assert _keys(records) == ["health.config.configMode", "health.config.ldapWireTrace"]
    assert records[0].severity is Severity.INFO
    assert engine.audit_application(None, ApplicationMode.CONFIGURATION) == []


@pytest.mark.unit
def test_new_user_profiles_need_a_defined_policy() -> None:
    engine = DiagnosticEngine(rules=[])
    snapshot = _snapshot(
        settings={"newUser.enable": True},
        extra_profiles={
            "password_policy": {"default": {}},
            "new_user": {
                "ok": {"newUser.passwordPolicy.profile": "default"},
                "broken": {"newUser.passwordPolicy.profile": "strict"},
            },
        },
    )

    records = engine.audit_application(snapshot, ApplicationMode.RUNNING)

    assert _keys(records) == ["health.newUser.passwordPolicyProblem"]
    assert records[0].parameters == ("broken", "password policy profile 'strict' is not defined")


@pytest.mark.unit
def test_new_user_check_respects_enable_flag_but_not_hide_flag() -> None:
    engine = DiagnosticEngine(rules=[])
    new_users = {"new_user": {"broken": {"newUser.passwordPolicy.profile": "missing"}}}

    disabled = _snapshot(extra_profiles=new_users)
    hidden = _snapshot(
        settings={
            "newUser.enable": True,
            "display.hideConfigHealthWarnings": True,
            "ldap.wireTrace.enable": True,
        },
        extra_profiles=new_users,
    )

    assert engine.audit_application(disabled, ApplicationMode.RUNNING) == []
    assert _keys(engine.audit_application(hidden, ApplicationMode.CONFIGURATION)) == [
        "health.config.configMode",
        "health.newUser.passwordPolicyProblem",
    ]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "scheme"),
    [
        ("ldap://host", "ldap"),
        ("ldaps://host:636", "ldaps"),
        ("LDAPS://Host", "ldaps"),
        ("//host", ""),
        ("host:389", "host"),
    ],
)
def test_parse_directory_url_returns_scheme(raw: str, scheme: str) -> None:
    assert parse_directory_url(raw) == scheme


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "reason"),
    [
        ("not a url", "whitespace"),
        ("ldap://host\x00", "control"),
        ("ldap://", "no authority or path"),
        ("ldap:", "no authority or path"),
        ("ldap://[::1", "IPv6"),
    ],
)
def test_parse_directory_url_rejects_malformed(raw: str, reason: str) -> None:
    with pytest.raises(UrlSyntaxError, match=reason):
        parse_directory_url(raw)


@pytest.mark.unit
def test_scheme_less_directory_urls_are_insecure_not_parse_errors() -> None:
    engine = DiagnosticEngine(rules=[])

    records = engine.audit(_snapshot(ldap={"ldap.serverUrls": ["//dir.example.com", "dir:389"]}))

    assert _keys(records) == ["health.config.ldapUnsecure"] * 2
    assert [record.parameters[1] for record in records] == ["//dir.example.com", "dir:389"]


@pytest.mark.unit
def test_insecure_url_reported_once_per_profile_per_url() -> None:
    engine = DiagnosticEngine(rules=[])
    secure_profile = {
        "ldap.serverUrls": ["ldaps://dir.example.com"],
        "ldap.testuser.username": "cn=health,ou=test",
        "ldap.proxy.password": _STRONG_PASSWORD,
        "challenge.userAttribute": "pwmResponseSet",
    }
    snapshot = _snapshot(
        extra_profiles={
            "ldap": {
                "east": {**secure_profile, "ldap.serverUrls": ["ldap://shared", "ldap://east"]},
                "west": {**secure_profile, "ldap.serverUrls": ["ldap://shared"]},
            }
        }
    )

    records = engine.audit(snapshot)

    located = [
        (record.parameters[0].split(" ⇨ ")[-2], record.parameters[1]) for record in records
    ]
    assert located == [
        ("east", "ldap://shared"),
        ("east", "ldap://east"),
        ("west", "ldap://shared"),
    ]


@pytest.mark.unit
def test_malformed_setting_value_fails_only_its_own_check() -> None:
    logger = _RecordingLogger()
    engine = DiagnosticEngine(rules=[], logger=logger)
    snapshot = _snapshot(
        settings={"ldap.wireTrace.enable": 5, "display.showDetailedErrors": True}
    )

    records = engine.audit(snapshot)

    assert _keys(records) == ["health.config.showDetailedErrors"]
    assert [(event, fields["rule_id"]) for event, fields in logger.events] == [
        ("health_rule_failed", "wire_trace")
    ]


@pytest.mark.unit
def test_non_ascii_digit_password_is_still_scored() -> None:
    logger = _RecordingLogger()
    engine = DiagnosticEngine(rules=[], logger=logger)

    records = engine.audit(_snapshot(ldap={"ldap.proxy.password": "a²"}))

    assert _keys(records) == ["health.config.weakPassword"]
    assert logger.events == []
