"""
settings-audit — setting descriptors

File: src/settings_audit/settings.py
Last updated: 2026-10-17

Purpose
- Describe the settings the diagnostic engine reads: key, syntax, default value,
  owning profile category, and the human menu path used in findings.

Functional requirements
- Only the settings consumed by the audit live here; the host server owns the full
  catalog.
- Location paths are built with a locale-specific separator supplied by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final, Protocol


class SettingSyntax(StrEnum):
    BOOLEAN = "BOOLEAN"
    STRING = "STRING"
    STRING_ARRAY = "STRING_ARRAY"
    PASSWORD = "PASSWORD"
    NUMERIC = "NUMERIC"
    SELECT = "SELECT"


class ProfileCategory(StrEnum):
    """Setting categories whose values are defined per named profile."""

    LDAP = "ldap"
    PASSWORD_POLICY = "password_policy"
    NEW_USER = "new_user"


class DataStorageMethod(StrEnum):
    """Where responses and OTP secrets are read from or written to."""

    AUTO = "AUTO"
    LDAP = "LDAP"
    DB = "DB"
    LOCALDB = "LOCALDB"


@dataclass(frozen=True, slots=True)
class Setting:
    """One setting descriptor."""

    key: str
    syntax: SettingSyntax
    label_path: tuple[str, ...]
    default: object = None
    category: ProfileCategory | None = None

    @property
    def has_profiles(self) -> bool:
        return self.category is not None

    def menu_location(self, profile_id: str | None = None, *, separator: str = " > ") -> str:
        """Human location path; the profile id is placed before the setting label."""

        parts = list(self.label_path)
        if profile_id is not None and self.has_profiles:
            parts.insert(len(parts) - 1, profile_id)
        return separator.join(parts)


_LDAP_MENU: Final[tuple[str, ...]] = ("Settings", "LDAP", "LDAP Directories")
_POLICY_MENU: Final[tuple[str, ...]] = ("Policies", "Password Policies")

PWM_SITE_URL: Final[Setting] = Setting(
    key="pwm.selfURL",
    syntax=SettingSyntax.STRING,
    label_path=("Settings", "Application", "Application", "Site URL"),
    default="http://localhost:8080/pwm",
)
HIDE_CONFIGURATION_HEALTH_WARNINGS: Final[Setting] = Setting(
    key="display.hideConfigHealthWarnings",
    syntax=SettingSyntax.BOOLEAN,
    label_path=("Settings", "User Interface", "Look & Feel", "Hide Configuration Health Warnings"),
    default=False,
)
LDAP_ENABLE_WIRE_TRACE: Final[Setting] = Setting(
    key="ldap.wireTrace.enable",
    syntax=SettingSyntax.BOOLEAN,
    label_path=("Settings", "LDAP", "LDAP Settings", "Enable LDAP Wire Trace"),
    default=False,
)
DISPLAY_SHOW_DETAILED_ERRORS: Final[Setting] = Setting(
    key="display.showDetailedErrors",
    syntax=SettingSyntax.BOOLEAN,
    label_path=("Settings", "User Interface", "Look & Feel", "Show Detailed Error Messages"),
    default=False,
)
NEWUSER_ENABLE: Final[Setting] = Setting(
    key="newUser.enable",
    syntax=SettingSyntax.BOOLEAN,
    label_path=("Modules", "Public", "New User Registration", "Enable New User Registration"),
    default=False,
)

LDAP_SERVER_URLS: Final[Setting] = Setting(
    key="ldap.serverUrls",
    syntax=SettingSyntax.STRING_ARRAY,
    label_path=(*_LDAP_MENU, "Connection", "LDAP URLs"),
    default=(),
    category=ProfileCategory.LDAP,
)
LDAP_TEST_USER_DN: Final[Setting] = Setting(
    key="ldap.testuser.username",
    syntax=SettingSyntax.STRING,
    label_path=(*_LDAP_MENU, "Connection", "LDAP Test User"),
    default="",
    category=ProfileCategory.LDAP,
)
LDAP_PROXY_USER_PASSWORD: Final[Setting] = Setting(
    key="ldap.proxy.password",
    syntax=SettingSyntax.PASSWORD,
    label_path=(*_LDAP_MENU, "Connection", "LDAP Proxy Password"),
    default=None,
    category=ProfileCategory.LDAP,
)
CHALLENGE_USER_ATTRIBUTE: Final[Setting] = Setting(
    key="challenge.userAttribute",
    syntax=SettingSyntax.STRING,
    label_path=(*_LDAP_MENU, "Attributes", "Challenge Response Attribute"),
    default="",
    category=ProfileCategory.LDAP,
)

FORGOTTEN_PASSWORD_READ_PREFERENCE: Final[Setting] = Setting(
    key="forgottenPassword.responseStorageMethod.read",
    syntax=SettingSyntax.SELECT,
    label_path=("Settings", "Storage", "Storage", "Response Read Location"),
    default=(DataStorageMethod.LDAP.value,),
)
FORGOTTEN_PASSWORD_WRITE_PREFERENCE: Final[Setting] = Setting(
    key="forgottenPassword.responseStorageMethod.write",
    syntax=SettingSyntax.SELECT,
    label_path=("Settings", "Storage", "Storage", "Response Write Location"),
    default=(DataStorageMethod.LDAP.value,),
)
OTP_SECRET_WRITE_PREFERENCE: Final[Setting] = Setting(
    key="otp.secret.storageMethod.write",
    syntax=SettingSyntax.SELECT,
    label_path=("Settings", "Storage", "Storage", "OTP Secret Write Location"),
    default=(DataStorageMethod.LDAP.value,),
)

DATABASE_CLASS: Final[Setting] = Setting(
    key="db.classname",
    syntax=SettingSyntax.STRING,
    label_path=("Settings", "Database", "Connection", "Database Driver Class"),
    default="",
)
DATABASE_URL: Final[Setting] = Setting(
    key="db.connection.url",
    syntax=SettingSyntax.STRING,
    label_path=("Settings", "Database", "Connection", "Database Connection String"),
    default="",
)
DATABASE_PASSWORD: Final[Setting] = Setting(
    key="db.connection.password",
    syntax=SettingSyntax.PASSWORD,
    label_path=("Settings", "Database", "Connection", "Database Password"),
    default=None,
)
EMAIL_PASSWORD: Final[Setting] = Setting(
    key="email.smtp.password",
    syntax=SettingSyntax.PASSWORD,
    label_path=("Settings", "Email", "Email Server", "SMTP Server Password"),
    default=None,
)
SMS_GATEWAY_PASSWORD: Final[Setting] = Setting(
    key="sms.gatewayPassword",
    syntax=SettingSyntax.PASSWORD,
    label_path=("Settings", "SMS", "SMS Gateway", "SMS Gateway Password"),
    default=None,
)

PASSWORD_POLICY_MINIMUM_LENGTH: Final[Setting] = Setting(
    key="password.policy.minimumLength",
    syntax=SettingSyntax.NUMERIC,
    label_path=(*_POLICY_MENU, "Length", "Minimum Length"),
    default=0,
    category=ProfileCategory.PASSWORD_POLICY,
)
PASSWORD_POLICY_MAXIMUM_LENGTH: Final[Setting] = Setting(
    key="password.policy.maximumLength",
    syntax=SettingSyntax.NUMERIC,
    label_path=(*_POLICY_MENU, "Length", "Maximum Length"),
    default=64,
    category=ProfileCategory.PASSWORD_POLICY,
)
PASSWORD_POLICY_MINIMUM_UPPERCASE: Final[Setting] = Setting(
    key="password.policy.minimumUpperCase",
    syntax=SettingSyntax.NUMERIC,
    label_path=(*_POLICY_MENU, "Characters", "Minimum Uppercase"),
    default=0,
    category=ProfileCategory.PASSWORD_POLICY,
)
PASSWORD_POLICY_MINIMUM_LOWERCASE: Final[Setting] = Setting(
    key="password.policy.minimumLowerCase",
    syntax=SettingSyntax.NUMERIC,
    label_path=(*_POLICY_MENU, "Characters", "Minimum Lowercase"),
    default=0,
    category=ProfileCategory.PASSWORD_POLICY,
)
PASSWORD_POLICY_MINIMUM_NUMERIC: Final[Setting] = Setting(
    key="password.policy.minimumNumeric",
    syntax=SettingSyntax.NUMERIC,
    label_path=(*_POLICY_MENU, "Characters", "Minimum Numeric"),
    default=0,
    category=ProfileCategory.PASSWORD_POLICY,
)
PASSWORD_POLICY_MINIMUM_SPECIAL: Final[Setting] = Setting(
    key="password.policy.minimumSpecial",
    syntax=SettingSyntax.NUMERIC,
    label_path=(*_POLICY_MENU, "Characters", "Minimum Special"),
    default=0,
    category=ProfileCategory.PASSWORD_POLICY,
)
PASSWORD_POLICY_MINIMUM_UNIQUE: Final[Setting] = Setting(
    key="password.policy.minimumUnique",
    syntax=SettingSyntax.NUMERIC,
    label_path=(*_POLICY_MENU, "Characters", "Minimum Unique"),
    default=0,
    category=ProfileCategory.PASSWORD_POLICY,
)

NEWUSER_PASSWORD_POLICY: Final[Setting] = Setting(
    key="newUser.passwordPolicy.profile",
    syntax=SettingSyntax.STRING,
    label_path=("Modules", "Public", "New User Profiles", "Password Policy Profile"),
    default="default",
    category=ProfileCategory.NEW_USER,
)

# Application property (not a setting) that lets the directory client accept any
# server certificate.
APP_PROPERTY_LDAP_PROMISCUOUS: Final[str] = "ldap.promiscuousEnable"
APP_PROPERTY_LABEL: Final[str] = "AppProperty"

ALL_SETTINGS: Final[tuple[Setting, ...]] = (
    PWM_SITE_URL,
    HIDE_CONFIGURATION_HEALTH_WARNINGS,
    LDAP_ENABLE_WIRE_TRACE,
    DISPLAY_SHOW_DETAILED_ERRORS,
    NEWUSER_ENABLE,
    LDAP_SERVER_URLS,
    LDAP_TEST_USER_DN,
    LDAP_PROXY_USER_PASSWORD,
    CHALLENGE_USER_ATTRIBUTE,
    FORGOTTEN_PASSWORD_READ_PREFERENCE,
    FORGOTTEN_PASSWORD_WRITE_PREFERENCE,
    OTP_SECRET_WRITE_PREFERENCE,
    DATABASE_CLASS,
    DATABASE_URL,
    DATABASE_PASSWORD,
    EMAIL_PASSWORD,
    SMS_GATEWAY_PASSWORD,
    PASSWORD_POLICY_MINIMUM_LENGTH,
    PASSWORD_POLICY_MAXIMUM_LENGTH,
    PASSWORD_POLICY_MINIMUM_UPPERCASE,
    PASSWORD_POLICY_MINIMUM_LOWERCASE,
    PASSWORD_POLICY_MINIMUM_NUMERIC,
    PASSWORD_POLICY_MINIMUM_SPECIAL,
    PASSWORD_POLICY_MINIMUM_UNIQUE,
    NEWUSER_PASSWORD_POLICY,
)

_BY_KEY: Final[dict[str, Setting]] = {setting.key: setting for setting in ALL_SETTINGS}


class _SeparatorSource(Protocol):
    def separator(self, locale: str | None = None) -> str: ...


def menu_location(
    setting: Setting,
    profile_id: str | None = None,
    catalog: _SeparatorSource | None = None,
    locale: str | None = None,
) -> str:
    """Location path of ``setting`` joined with the catalog separator for ``locale``."""

    if catalog is None:
        return setting.menu_location(profile_id)
    return setting.menu_location(profile_id, separator=catalog.separator(locale))


def setting_for_key(key: str) -> Setting | None:
    return _BY_KEY.get(key)


def settings_with_syntax(syntax: SettingSyntax) -> tuple[Setting, ...]:
    """All known settings of ``syntax`` in catalog order."""

    return tuple(setting for setting in ALL_SETTINGS if setting.syntax is syntax)


__all__ = [
    "ALL_SETTINGS",
    "APP_PROPERTY_LABEL",
    "APP_PROPERTY_LDAP_PROMISCUOUS",
    "CHALLENGE_USER_ATTRIBUTE",
    "DATABASE_CLASS",
    "DATABASE_PASSWORD",
    "DATABASE_URL",
    "DISPLAY_SHOW_DETAILED_ERRORS",
    "DataStorageMethod",
    "EMAIL_PASSWORD",
    "FORGOTTEN_PASSWORD_READ_PREFERENCE",
    "FORGOTTEN_PASSWORD_WRITE_PREFERENCE",
    "HIDE_CONFIGURATION_HEALTH_WARNINGS",
    "LDAP_ENABLE_WIRE_TRACE",
    "LDAP_PROXY_USER_PASSWORD",
    "LDAP_SERVER_URLS",
    "LDAP_TEST_USER_DN",
    "NEWUSER_ENABLE",
    "NEWUSER_PASSWORD_POLICY",
    "OTP_SECRET_WRITE_PREFERENCE",
    "PASSWORD_POLICY_MAXIMUM_LENGTH",
    "PASSWORD_POLICY_MINIMUM_LENGTH",
    "PASSWORD_POLICY_MINIMUM_LOWERCASE",
    "PASSWORD_POLICY_MINIMUM_NUMERIC",
    "PASSWORD_POLICY_MINIMUM_SPECIAL",
    "PASSWORD_POLICY_MINIMUM_UNIQUE",
    "PASSWORD_POLICY_MINIMUM_UPPERCASE",
    "PWM_SITE_URL",
    "ProfileCategory",
    "SMS_GATEWAY_PASSWORD",
    "Setting",
    "SettingSyntax",
    "menu_location",
    "setting_for_key",
    "settings_with_syntax",
]
