"""Stable constants shared across the values and health packages."""

from __future__ import annotations

from typing import Final

# Schema versions for persisted contracts.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Legacy persisted syntax marker for flat string-array action values.
LEGACY_STRING_ARRAY_SYNTAX: Final[str] = "STRING_ARRAY"
VALUE_ELEMENT_NAME: Final[str] = "value"
LOCALE_ATTRIBUTE: Final[str] = "locale"
SYNTAX_ATTRIBUTE: Final[str] = "syntax"

DEFAULT_LOCALE: Final[str] = "en"

# Password strength scores below this value produce a finding.
WEAK_PASSWORD_THRESHOLD: Final[int] = 50

SECURE_DIRECTORY_SCHEME: Final[str] = "ldaps"

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_LOCALE",
    "LEGACY_STRING_ARRAY_SYNTAX",
    "LOCALE_ATTRIBUTE",
    "SECURE_DIRECTORY_SCHEME",
    "SYNTAX_ATTRIBUTE",
    "VALUE_ELEMENT_NAME",
    "WEAK_PASSWORD_THRESHOLD",
]
