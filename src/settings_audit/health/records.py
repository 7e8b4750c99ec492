"""
settings-audit — diagnostic records

File: src/settings_audit/health/records.py
Last updated: 2026-10-17

Purpose
- Immutable finding emitted by diagnostic rules: severity, topic, catalog message key,
  positional parameters and the locale the finding was produced for.

Functional requirements
- Records carry message keys, not rendered text; rendering happens against a
  message catalog at presentation time.
- ``to_dict`` output is stable-keyed and JSON-safe.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import TYPE_CHECKING

from settings_audit.constants import DEFAULT_LOCALE

if TYPE_CHECKING:
    from settings_audit.health.messages import MessageCatalog


class Severity(StrEnum):
    INFO = "INFO"
    WARN = "WARN"
    SEVERE = "SEVERE"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARN: 1, Severity.SEVERE: 2}


class HealthTopic(StrEnum):
    CONFIGURATION = "Configuration"
    DATABASE = "Database"
    LDAP = "LDAP"
    PASSWORD_POLICY = "PasswordPolicy"


class HealthMessage(Enum):
    """Finding kinds: catalog key, default severity and topic."""

    CONFIG_MODE = ("health.config.configMode", Severity.INFO, HealthTopic.CONFIGURATION)
    NO_SITE_URL = ("health.config.noSiteURL", Severity.WARN, HealthTopic.CONFIGURATION)
    LDAP_WIRE_TRACE = ("health.config.ldapWireTrace", Severity.WARN, HealthTopic.CONFIGURATION)
    PROMISCUOUS_LDAP = ("health.config.promiscuousLDAP", Severity.WARN, HealthTopic.CONFIGURATION)
    SHOW_DETAILED_ERRORS = (
        "health.config.showDetailedErrors",
        Severity.WARN,
        HealthTopic.CONFIGURATION,
    )
    ADD_TEST_USER = ("health.config.addTestUser", Severity.WARN, HealthTopic.CONFIGURATION)
    LDAP_UNSECURE = ("health.config.ldapUnsecure", Severity.WARN, HealthTopic.CONFIGURATION)
    PARSE_ERROR = ("health.config.parseError", Severity.WARN, HealthTopic.CONFIGURATION)
    WEAK_PASSWORD = ("health.config.weakPassword", Severity.WARN, HealthTopic.CONFIGURATION)
    MISSING_LDAP_RESPONSE_ATTR = (
        "health.config.missingLDAPResponseAttr",
        Severity.WARN,
        HealthTopic.CONFIGURATION,
    )
    MISSING_DB = ("health.config.missingDB", Severity.WARN, HealthTopic.DATABASE)
    LOCALDB_RESPONSE_STORAGE = (
        "health.config.useLocalDBResponseStorage",
        Severity.INFO,
        HealthTopic.CONFIGURATION,
    )
    PASSWORD_POLICY_PROBLEM = (
        "health.config.passwordPolicyProblem",
        Severity.WARN,
        HealthTopic.PASSWORD_POLICY,
    )
    NEW_USER_POLICY_PROBLEM = (
        "health.newUser.passwordPolicyProblem",
        Severity.WARN,
        HealthTopic.CONFIGURATION,
    )

    def __init__(self, key: str, severity: Severity, topic: HealthTopic) -> None:
        self.key = key
        self.severity = severity
        self.topic = topic


@dataclass(frozen=True, slots=True)
class DiagnosticRecord:
    """One finding."""

    severity: Severity
    topic: HealthTopic
    message_key: str
    parameters: tuple[str, ...] = ()
    locale: str = DEFAULT_LOCALE

    def __post_init__(self) -> None:
        object.__setattr__(self, "severity", Severity(self.severity))
        object.__setattr__(self, "topic", HealthTopic(self.topic))
        object.__setattr__(self, "parameters", tuple(str(item) for item in self.parameters))

    @classmethod
    def for_message(
        cls,
        message: HealthMessage,
        *parameters: object,
        locale: str | None = None,
    ) -> DiagnosticRecord:
        return cls(
            severity=message.severity,
            topic=message.topic,
            message_key=message.key,
            parameters=tuple(str(item) for item in parameters),
            locale=locale or DEFAULT_LOCALE,
        )

    def render(self, catalog: MessageCatalog) -> str:
        """Localized text for this record."""

        return catalog.format(self.message_key, self.parameters, locale=self.locale)

    def to_dict(self) -> dict[str, object]:
        return {
            "severity": self.severity.value,
            "topic": self.topic.value,
            "messageKey": self.message_key,
            "parameters": list(self.parameters),
            "locale": self.locale,
        }


__all__ = ["DiagnosticRecord", "HealthMessage", "HealthTopic", "Severity"]
