"""
settings-audit values package public API.

File: src/settings_audit/values/__init__.py
Last updated: 2026-10-17

Purpose
- Export the action entry variant and the immutable action configuration value.
"""

from settings_audit.values.action import (
    ActionEntry,
    ActionKind,
    ActionPayload,
    DirectoryAction,
    DirectoryMethod,
    ParseError,
    StructuredConfigError,
    WebServiceAction,
    WebServiceMethod,
)
from settings_audit.values.action_value import (
    CERTIFICATE_INFOS_KEY,
    DUPLICATE_NAME_PREFIX,
    FORMAT_ERROR_PREFIX,
    REQUIRED_VALUE_MISSING,
    ActionValue,
)

__all__ = [
    "CERTIFICATE_INFOS_KEY",
    "DUPLICATE_NAME_PREFIX",
    "FORMAT_ERROR_PREFIX",
    "REQUIRED_VALUE_MISSING",
    "ActionEntry",
    "ActionKind",
    "ActionPayload",
    "ActionValue",
    "DirectoryAction",
    "DirectoryMethod",
    "ParseError",
    "StructuredConfigError",
    "WebServiceAction",
    "WebServiceMethod",
]
