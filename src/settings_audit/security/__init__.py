"""
settings-audit security package.

File: src/settings_audit/security/__init__.py
Last updated: 2026-10-17

Purpose
- Certificate inspection for pinned web-service actions and secret redaction for
  logs and CLI output.
"""

from settings_audit.security.certificates import CertificateInspector, X509CertificateInspector
from settings_audit.security.redaction import (
    DEFAULT_REDACTION_CONFIG,
    REDACTED_VALUE,
    RedactionConfig,
    is_sensitive_key,
    redact_structure,
    redact_text,
)

__all__ = [
    "DEFAULT_REDACTION_CONFIG",
    "REDACTED_VALUE",
    "CertificateInspector",
    "RedactionConfig",
    "X509CertificateInspector",
    "is_sensitive_key",
    "redact_structure",
    "redact_text",
]
