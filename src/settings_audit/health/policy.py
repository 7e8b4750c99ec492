"""
settings-audit — password policy consistency

File: src/settings_audit/health/policy.py
Last updated: 2026-10-17

Purpose
- Read one password-policy profile and report rule combinations no password can
  satisfy.
"""

from __future__ import annotations

from dataclasses import dataclass

from settings_audit.health.records import DiagnosticRecord, HealthMessage
from settings_audit.settings import (
    PASSWORD_POLICY_MAXIMUM_LENGTH,
    PASSWORD_POLICY_MINIMUM_LENGTH,
    PASSWORD_POLICY_MINIMUM_LOWERCASE,
    PASSWORD_POLICY_MINIMUM_NUMERIC,
    PASSWORD_POLICY_MINIMUM_SPECIAL,
    PASSWORD_POLICY_MINIMUM_UNIQUE,
    PASSWORD_POLICY_MINIMUM_UPPERCASE,
)
from settings_audit.snapshot import SettingsProfile


@dataclass(frozen=True, slots=True)
class PasswordPolicy:
    profile_id: str
    minimum_length: int = 0
    maximum_length: int = 0
    minimum_upper: int = 0
    minimum_lower: int = 0
    minimum_numeric: int = 0
    minimum_special: int = 0
    minimum_unique: int = 0

    @classmethod
    def from_profile(cls, profile: SettingsProfile) -> PasswordPolicy:
        return cls(
            profile_id=profile.identifier,
            minimum_length=profile.read_int(PASSWORD_POLICY_MINIMUM_LENGTH),
            maximum_length=profile.read_int(PASSWORD_POLICY_MAXIMUM_LENGTH),
            minimum_upper=profile.read_int(PASSWORD_POLICY_MINIMUM_UPPERCASE),
            minimum_lower=profile.read_int(PASSWORD_POLICY_MINIMUM_LOWERCASE),
            minimum_numeric=profile.read_int(PASSWORD_POLICY_MINIMUM_NUMERIC),
            minimum_special=profile.read_int(PASSWORD_POLICY_MINIMUM_SPECIAL),
            minimum_unique=profile.read_int(PASSWORD_POLICY_MINIMUM_UNIQUE),
        )

    @property
    def required_class_total(self) -> int:
        return self.minimum_upper + self.minimum_lower + self.minimum_numeric + self.minimum_special

    def problems(self) -> list[str]:
        """Plain-text descriptions of unsatisfiable combinations.

        A maximum length of zero means unbounded and disables the comparisons.
        """

        if self.maximum_length <= 0:
            return []
        found: list[str] = []
        if self.minimum_length > self.maximum_length:
            found.append(
                f"minimum length {self.minimum_length} is greater than "
                f"maximum length {self.maximum_length}"
            )
        if self.required_class_total > self.maximum_length:
            found.append(
                f"required character classes total {self.required_class_total}, "
                f"which exceeds maximum length {self.maximum_length}"
            )
        if self.minimum_unique > self.maximum_length:
            found.append(
                f"minimum unique characters {self.minimum_unique} is greater than "
                f"maximum length {self.maximum_length}"
            )
        return found

    def health(self, locale: str | None = None) -> list[DiagnosticRecord]:
        return [
            DiagnosticRecord.for_message(
                HealthMessage.PASSWORD_POLICY_PROBLEM, self.profile_id, problem, locale=locale
            )
            for problem in self.problems()
        ]


__all__ = ["PasswordPolicy"]
