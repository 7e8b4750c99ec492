"""
settings-audit — configuration diagnostic engine

File: src/settings_audit/health/engine.py
Last updated: 2026-10-17

Purpose
- Run the built-in configuration checks and every registered diagnostic rule over a
  snapshot and collect the findings.

Functional requirements
- Each check runs in its own error boundary: a failure is logged and the remaining
  checks still run. Nothing raised by a check reaches the caller.
- Findings keep check order; no de-duplication, no sorting.
- The engine holds no per-call state, so one instance may serve concurrent audits.

Built-in check order
- site URL, wire trace, promiscuous directory client, detailed errors,
  per-profile test user, per-profile URL security, password strength.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Final
from urllib.parse import urlsplit

import structlog

from settings_audit.constants import SECURE_DIRECTORY_SCHEME, WEAK_PASSWORD_THRESHOLD
from settings_audit.health.messages import MessageCatalog, default_catalog
from settings_audit.health.password import HeuristicStrengthScorer, PasswordStrengthScorer
from settings_audit.health.policy import PasswordPolicy
from settings_audit.health.records import DiagnosticRecord, HealthMessage
from settings_audit.health.rules import DEFAULT_RULE_REGISTRY, DiagnosticRule
from settings_audit.settings import (
    APP_PROPERTY_LABEL,
    APP_PROPERTY_LDAP_PROMISCUOUS,
    DISPLAY_SHOW_DETAILED_ERRORS,
    HIDE_CONFIGURATION_HEALTH_WARNINGS,
    LDAP_ENABLE_WIRE_TRACE,
    LDAP_PROXY_USER_PASSWORD,
    LDAP_SERVER_URLS,
    LDAP_TEST_USER_DN,
    NEWUSER_ENABLE,
    NEWUSER_PASSWORD_POLICY,
    PWM_SITE_URL,
    ProfileCategory,
    Setting,
    SettingSyntax,
    menu_location,
    settings_with_syntax,
)
from settings_audit.snapshot import ApplicationMode, ConfigurationSnapshot, SettingsProfile

_TRUE_PROPERTY_VALUES: Final[frozenset[str]] = frozenset({"true", "yes", "on", "1"})

_BuiltinCheck = Callable[[ConfigurationSnapshot, str | None], list[DiagnosticRecord]]


class UrlSyntaxError(ValueError):
    """Raised when a configured directory URL cannot be parsed."""


class DiagnosticEngine:
    """Fault-isolated configuration audit."""

    def __init__(
        self,
        *,
        rules: Sequence[DiagnosticRule] | None = None,
        scorer: PasswordStrengthScorer | None = None,
        catalog: MessageCatalog | None = None,
        logger: Any | None = None,
    ) -> None:
        self._rules: tuple[DiagnosticRule, ...] = (
            tuple(rules) if rules is not None else DEFAULT_RULE_REGISTRY.create_all()
        )
        self._scorer = scorer if scorer is not None else HeuristicStrengthScorer()
        self._catalog = catalog if catalog is not None else default_catalog()
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def rules(self) -> tuple[DiagnosticRule, ...]:
        return self._rules

    @property
    def catalog(self) -> MessageCatalog:
        return self._catalog

    def audit(
        self, snapshot: ConfigurationSnapshot | None, locale: str | None = None
    ) -> list[DiagnosticRecord]:
        """Findings for ``snapshot``; empty when health warnings are hidden."""

        if snapshot is None or self._warnings_hidden(snapshot):
            return []

        records: list[DiagnosticRecord] = []
        for check_id, check in self._builtin_checks():
            records.extend(self._guarded(check_id, check, snapshot, locale))
        for rule in self._rules:
            records.extend(self._guarded(rule.rule_id, rule.audit, snapshot, locale))
        return records

    def audit_application(
        self,
        snapshot: ConfigurationSnapshot | None,
        mode: ApplicationMode,
        locale: str | None = None,
    ) -> list[DiagnosticRecord]:
        """Application-level audit: run mode, new-user policies, then ``audit``."""

        if snapshot is None:
            return []
        records: list[DiagnosticRecord] = []
        if mode is ApplicationMode.CONFIGURATION:
            records.append(DiagnosticRecord.for_message(HealthMessage.CONFIG_MODE, locale=locale))
        records.extend(
            self._guarded("new_user_policy", self._check_new_user_policies, snapshot, locale)
        )
        records.extend(self.audit(snapshot, locale))
        return records

    # -- boundaries --------------------------------------------------------------------

    def _guarded(
        self,
        check_id: str,
        check: Callable[[ConfigurationSnapshot, str | None], Sequence[DiagnosticRecord]],
        snapshot: ConfigurationSnapshot,
        locale: str | None,
    ) -> list[DiagnosticRecord]:
        try:
            return list(check(snapshot, locale))
        except Exception as exc:  # noqa: BLE001
            self._logger.warning(
                "health_rule_failed",
                rule_id=check_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return []

    def _warnings_hidden(self, snapshot: ConfigurationSnapshot) -> bool:
        try:
            return snapshot.read_boolean(HIDE_CONFIGURATION_HEALTH_WARNINGS)
        except Exception as exc:  # noqa: BLE001
            self._logger.warning(
                "health_setting_unreadable",
                setting=HIDE_CONFIGURATION_HEALTH_WARNINGS.key,
                error=str(exc),
            )
            return False

    def _builtin_checks(self) -> tuple[tuple[str, _BuiltinCheck], ...]:
        return (
            ("site_url", self._check_site_url),
            ("wire_trace", self._check_wire_trace),
            ("promiscuous_directory", self._check_promiscuous_directory),
            ("detailed_errors", self._check_detailed_errors),
            ("test_user", self._check_test_users),
            ("directory_url_security", self._check_directory_urls),
            ("password_strength", self._check_password_strength),
        )

    def _location(self, setting: Setting, profile_id: str | None, locale: str | None) -> str:
        return menu_location(setting, profile_id, self._catalog, locale)

    # -- built-in checks ---------------------------------------------------------------

    def _check_site_url(
        self, snapshot: ConfigurationSnapshot, locale: str | None
    ) -> list[DiagnosticRecord]:
        site_url = snapshot.read_string(PWM_SITE_URL).strip()
        if site_url and site_url != snapshot.default_value(PWM_SITE_URL):
            return []
        return [
            DiagnosticRecord.for_message(
                HealthMessage.NO_SITE_URL,
                self._location(PWM_SITE_URL, None, locale),
                locale=locale,
            )
        ]

    def _check_wire_trace(
        self, snapshot: ConfigurationSnapshot, locale: str | None
    ) -> list[DiagnosticRecord]:
        if not snapshot.read_boolean(LDAP_ENABLE_WIRE_TRACE):
            return []
        return [
            DiagnosticRecord.for_message(
                HealthMessage.LDAP_WIRE_TRACE,
                self._location(LDAP_ENABLE_WIRE_TRACE, None, locale),
                locale=locale,
            )
        ]

    def _check_promiscuous_directory(
        self, snapshot: ConfigurationSnapshot, locale: str | None
    ) -> list[DiagnosticRecord]:
        raw = snapshot.read_app_property(APP_PROPERTY_LDAP_PROMISCUOUS)
        if raw is None or raw.strip().lower() not in _TRUE_PROPERTY_VALUES:
            return []
        location = self._catalog.separator(locale).join(
            (APP_PROPERTY_LABEL, APP_PROPERTY_LDAP_PROMISCUOUS)
        )
        return [
            DiagnosticRecord.for_message(HealthMessage.PROMISCUOUS_LDAP, location, locale=locale)
        ]

    def _check_detailed_errors(
        self, snapshot: ConfigurationSnapshot, locale: str | None
    ) -> list[DiagnosticRecord]:
        if not snapshot.read_boolean(DISPLAY_SHOW_DETAILED_ERRORS):
            return []
        return [
            DiagnosticRecord.for_message(
                HealthMessage.SHOW_DETAILED_ERRORS,
                self._location(DISPLAY_SHOW_DETAILED_ERRORS, None, locale),
                locale=locale,
            )
        ]

    def _check_test_users(
        self, snapshot: ConfigurationSnapshot, locale: str | None
    ) -> list[DiagnosticRecord]:
        records: list[DiagnosticRecord] = []
        for profile in snapshot.enumerate_profiles(ProfileCategory.LDAP):
            if profile.read_string(LDAP_TEST_USER_DN).strip():
                continue
            records.append(
                DiagnosticRecord.for_message(
                    HealthMessage.ADD_TEST_USER,
                    self._location(LDAP_TEST_USER_DN, profile.identifier, locale),
                    locale=locale,
                )
            )
        return records

    def _check_directory_urls(
        self, snapshot: ConfigurationSnapshot, locale: str | None
    ) -> list[DiagnosticRecord]:
        records: list[DiagnosticRecord] = []
        for profile in snapshot.enumerate_profiles(ProfileCategory.LDAP):
            location = self._location(LDAP_SERVER_URLS, profile.identifier, locale)
            for raw_url in profile.read_string_list(LDAP_SERVER_URLS):
                try:
                    scheme = parse_directory_url(raw_url)
                except UrlSyntaxError as exc:
                    records.append(
                        DiagnosticRecord.for_message(
                            HealthMessage.PARSE_ERROR, str(exc), location, raw_url, locale=locale
                        )
                    )
                    continue
                if scheme.lower() != SECURE_DIRECTORY_SCHEME:
                    records.append(
                        DiagnosticRecord.for_message(
                            HealthMessage.LDAP_UNSECURE, location, raw_url, locale=locale
                        )
                    )
        return records

    def _check_password_strength(
        self, snapshot: ConfigurationSnapshot, locale: str | None
    ) -> list[DiagnosticRecord]:
        records: list[DiagnosticRecord] = []

        for setting in settings_with_syntax(SettingSyntax.PASSWORD):
            if setting.has_profiles:
                continue
            location = self._location(setting, None, locale)
            try:
                value = snapshot.read_password(setting)
                if value == snapshot.default_value(setting):
                    continue
                score = self._scorer.score(value)
            except Exception as exc:  # noqa: BLE001
                self._logger.warning(
                    "password_score_failed", setting=setting.key, location=location, error=str(exc)
                )
                continue
            records.extend(self._weak_password_records(location, score, locale))

        for profile in snapshot.enumerate_profiles(ProfileCategory.LDAP):
            location = self._location(LDAP_PROXY_USER_PASSWORD, profile.identifier, locale)
            try:
                score = self._scorer.score(profile.read_password(LDAP_PROXY_USER_PASSWORD))
            except Exception as exc:  # noqa: BLE001
                self._logger.warning(
                    "password_score_failed",
                    setting=LDAP_PROXY_USER_PASSWORD.key,
                    profile_id=profile.identifier,
                    location=location,
                    error=str(exc),
                )
                continue
            records.extend(self._weak_password_records(location, score, locale))

        return records

    def _weak_password_records(
        self, location: str, score: int, locale: str | None
    ) -> list[DiagnosticRecord]:
        if score >= WEAK_PASSWORD_THRESHOLD:
            return []
        return [
            DiagnosticRecord.for_message(
                HealthMessage.WEAK_PASSWORD, location, str(score), locale=locale
            )
        ]

    def _check_new_user_policies(
        self, snapshot: ConfigurationSnapshot, locale: str | None
    ) -> list[DiagnosticRecord]:
        if not snapshot.read_boolean(NEWUSER_ENABLE):
            return []
        policies = {
            profile.identifier: profile
            for profile in snapshot.enumerate_profiles(ProfileCategory.PASSWORD_POLICY)
        }
        records: list[DiagnosticRecord] = []
        for profile in snapshot.enumerate_profiles(ProfileCategory.NEW_USER):
            try:
                problem = _new_user_policy_problem(profile, policies)
            except Exception as exc:  # noqa: BLE001
                problem = str(exc)
            if problem is None:
                continue
            records.append(
                DiagnosticRecord.for_message(
                    HealthMessage.NEW_USER_POLICY_PROBLEM,
                    profile.identifier,
                    problem,
                    locale=locale,
                )
            )
        return records


def _new_user_policy_problem(
    profile: SettingsProfile, policies: Mapping[str, SettingsProfile]
) -> str | None:
    policy_id = profile.read_string(NEWUSER_PASSWORD_POLICY).strip()
    policy_profile = policies.get(policy_id)
    if policy_profile is None:
        return f"password policy profile {policy_id!r} is not defined"
    PasswordPolicy.from_profile(policy_profile)
    return None


def parse_directory_url(raw_url: str) -> str:
    """Return the scheme of ``raw_url`` (empty when it has none).

    Raise ``UrlSyntaxError`` when the string is not a syntactically valid URL.
    Scheme-less references such as ``//host`` parse and are classified by the caller.
    """

    if any(char.isspace() or unicodedata.category(char) == "Cc" for char in raw_url):
        raise UrlSyntaxError("url contains whitespace or control characters")
    try:
        parts = urlsplit(raw_url)
    except ValueError as exc:
        raise UrlSyntaxError(str(exc)) from exc
    remainder = raw_url[len(parts.scheme) + 1 :] if parts.scheme else raw_url
    if remainder in ("", "//"):
        raise UrlSyntaxError("url has no authority or path")
    return parts.scheme


__all__ = ["DiagnosticEngine", "UrlSyntaxError", "parse_directory_url"]
