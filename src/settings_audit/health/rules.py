"""
settings-audit — pluggable diagnostic rules

File: src/settings_audit/health/rules.py
Last updated: 2026-10-17

Purpose
- Define the diagnostic rule interface and an explicit, ordered rule registry.
- Ship the pluggable rules audited after the engine's built-in checks.

Functional requirements
- Registration order is execution order; there is no reflection-based discovery.
- Duplicate rule ids are rejected.
- Rules never mutate the snapshot.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, NoReturn, Protocol, TypeVar, runtime_checkable

import structlog

from settings_audit.health.messages import MessageCatalog, default_catalog
from settings_audit.health.policy import PasswordPolicy
from settings_audit.health.records import DiagnosticRecord, HealthMessage
from settings_audit.settings import (
    CHALLENGE_USER_ATTRIBUTE,
    DATABASE_CLASS,
    DATABASE_URL,
    FORGOTTEN_PASSWORD_READ_PREFERENCE,
    FORGOTTEN_PASSWORD_WRITE_PREFERENCE,
    OTP_SECRET_WRITE_PREFERENCE,
    DataStorageMethod,
    ProfileCategory,
    Setting,
    menu_location,
)
from settings_audit.snapshot import ConfigurationSnapshot


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


def _as_rule_id(value: object) -> str:
    if not isinstance(value, str):
        _fail("rule_id", f"expected string, got {type(value).__name__}")
    normalized = value.strip()
    if not normalized:
        _fail("rule_id", "must not be empty")
    return normalized


def _database_configured(snapshot: ConfigurationSnapshot) -> bool:
    return bool(
        snapshot.read_string(DATABASE_CLASS).strip() and snapshot.read_string(DATABASE_URL).strip()
    )


@runtime_checkable
class DiagnosticRule(Protocol):
    """One independent configuration check."""

    rule_id: str

    def audit(
        self, snapshot: ConfigurationSnapshot, locale: str | None
    ) -> Sequence[DiagnosticRecord]: ...


RuleFactory = Callable[[], DiagnosticRule]
RuleType = TypeVar("RuleType")


@dataclass(frozen=True, slots=True)
class RuleRegistration:
    rule_id: str
    factory: RuleFactory


class RuleRegistry:
    """Ordered rule factory registry."""

    def __init__(self) -> None:
        self._registrations: dict[str, RuleRegistration] = {}

    def register(self, rule_id: str, factory: RuleFactory) -> None:
        normalized_id = _as_rule_id(rule_id)
        if not callable(factory):
            _fail("factory", "must be callable")
        if normalized_id in self._registrations:
            _fail("rule_id", f"rule {normalized_id!r} is already registered")
        self._registrations[normalized_id] = RuleRegistration(
            rule_id=normalized_id, factory=factory
        )

    def contains(self, rule_id: str) -> bool:
        return _as_rule_id(rule_id) in self._registrations

    def registered_ids(self) -> tuple[str, ...]:
        return tuple(self._registrations)

    def create(self, rule_id: str) -> DiagnosticRule:
        normalized_id = _as_rule_id(rule_id)
        registration = self._registrations.get(normalized_id)
        if registration is None:
            known = ", ".join(self.registered_ids())
            _fail("rule_id", f"unknown rule {normalized_id!r}; registered: [{known}]")
        rule = registration.factory()
        if not isinstance(rule, DiagnosticRule):
            _fail("factory", f"{normalized_id!r} factory did not return a DiagnosticRule")
        return rule

    def create_all(self) -> tuple[DiagnosticRule, ...]:
        """Instantiate every registered rule in registration order."""

        return tuple(self.create(rule_id) for rule_id in self._registrations)


DEFAULT_RULE_REGISTRY = RuleRegistry()


def register_builtin_rule(
    rule_id: str,
    *,
    registry: RuleRegistry | None = None,
) -> Callable[[type[RuleType]], type[RuleType]]:
    """Decorator that registers a zero-argument rule class."""

    target = registry if registry is not None else DEFAULT_RULE_REGISTRY

    def decorator(rule_cls: type[RuleType]) -> type[RuleType]:
        target.register(rule_id, factory=lambda: rule_cls())
        return rule_cls

    return decorator


class _CatalogRule:
    rule_id = ""

    def __init__(
        self,
        *,
        catalog: MessageCatalog | None = None,
        logger: Any | None = None,
    ) -> None:
        self._catalog = catalog if catalog is not None else default_catalog()
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def _location(self, setting: Setting, profile_id: str | None, locale: str | None) -> str:
        return menu_location(setting, profile_id, self._catalog, locale)


@register_builtin_rule("response_attribute")
class ResponseAttributeRule(_CatalogRule):
    """Directory response storage needs a response attribute on every directory profile."""

    rule_id = "response_attribute"

    def audit(
        self, snapshot: ConfigurationSnapshot, locale: str | None
    ) -> list[DiagnosticRecord]:
        records: list[DiagnosticRecord] = []
        for storage_setting in (
            FORGOTTEN_PASSWORD_READ_PREFERENCE,
            FORGOTTEN_PASSWORD_WRITE_PREFERENCE,
        ):
            methods = snapshot.read_string_list(storage_setting)
            if DataStorageMethod.LDAP.value not in methods:
                continue
            for profile in snapshot.enumerate_profiles(ProfileCategory.LDAP):
                if profile.read_string(CHALLENGE_USER_ATTRIBUTE).strip():
                    continue
                records.append(
                    DiagnosticRecord.for_message(
                        HealthMessage.MISSING_LDAP_RESPONSE_ATTR,
                        self._location(storage_setting, None, locale),
                        self._location(CHALLENGE_USER_ATTRIBUTE, profile.identifier, locale),
                        locale=locale,
                    )
                )
        return records


@register_builtin_rule("secondary_store")
class SecondaryStoreRule(_CatalogRule):
    """Storage preferences must point at stores that are actually configured."""

    rule_id = "secondary_store"

    def audit(
        self, snapshot: ConfigurationSnapshot, locale: str | None
    ) -> list[DiagnosticRecord]:
        records: list[DiagnosticRecord] = []
        storage_settings = (
            FORGOTTEN_PASSWORD_READ_PREFERENCE,
            FORGOTTEN_PASSWORD_WRITE_PREFERENCE,
            OTP_SECRET_WRITE_PREFERENCE,
        )
        needs_database = any(
            DataStorageMethod.DB.value in snapshot.read_string_list(setting)
            for setting in storage_settings
        )
        if needs_database and not _database_configured(snapshot):
            records.append(DiagnosticRecord.for_message(HealthMessage.MISSING_DB, locale=locale))

        for setting in (FORGOTTEN_PASSWORD_WRITE_PREFERENCE, OTP_SECRET_WRITE_PREFERENCE):
            if DataStorageMethod.LOCALDB.value in snapshot.read_string_list(setting):
                records.append(
                    DiagnosticRecord.for_message(
                        HealthMessage.LOCALDB_RESPONSE_STORAGE,
                        self._location(setting, None, locale),
                        locale=locale,
                    )
                )
        return records


@register_builtin_rule("password_policy")
class PasswordPolicyRule(_CatalogRule):
    """Every password policy profile must be satisfiable."""

    rule_id = "password_policy"

    def audit(
        self, snapshot: ConfigurationSnapshot, locale: str | None
    ) -> list[DiagnosticRecord]:
        records: list[DiagnosticRecord] = []
        for profile in snapshot.enumerate_profiles(ProfileCategory.PASSWORD_POLICY):
            try:
                records.extend(PasswordPolicy.from_profile(profile).health(locale))
            except Exception as exc:  # noqa: BLE001
                self._logger.warning(
                    "password_policy_check_failed",
                    rule_id=self.rule_id,
                    profile_id=profile.identifier,
                    error=str(exc),
                )
        return records


__all__ = [
    "DEFAULT_RULE_REGISTRY",
    "DiagnosticRule",
    "PasswordPolicyRule",
    "ResponseAttributeRule",
    "RuleFactory",
    "RuleRegistration",
    "RuleRegistry",
    "SecondaryStoreRule",
    "register_builtin_rule",
]
