"""
settings-audit health package public API.

File: src/settings_audit/health/__init__.py
Last updated: 2026-10-17

Purpose
- Export the diagnostic engine, rule registry, records and default collaborators.
"""

from settings_audit.health.engine import DiagnosticEngine, UrlSyntaxError, parse_directory_url
from settings_audit.health.messages import (
    MessageCatalog,
    MessageCatalogError,
    default_catalog,
)
from settings_audit.health.password import HeuristicStrengthScorer, PasswordStrengthScorer
from settings_audit.health.policy import PasswordPolicy
from settings_audit.health.records import DiagnosticRecord, HealthMessage, HealthTopic, Severity
from settings_audit.health.rules import (
    DEFAULT_RULE_REGISTRY,
    DiagnosticRule,
    PasswordPolicyRule,
    ResponseAttributeRule,
    RuleRegistry,
    SecondaryStoreRule,
    register_builtin_rule,
)

__all__ = [
    "DEFAULT_RULE_REGISTRY",
    "DiagnosticEngine",
    "DiagnosticRecord",
    "DiagnosticRule",
    "HealthMessage",
    "HealthTopic",
    "HeuristicStrengthScorer",
    "MessageCatalog",
    "MessageCatalogError",
    "PasswordPolicy",
    "PasswordPolicyRule",
    "PasswordStrengthScorer",
    "ResponseAttributeRule",
    "RuleRegistry",
    "SecondaryStoreRule",
    "Severity",
    "UrlSyntaxError",
    "default_catalog",
    "parse_directory_url",
    "register_builtin_rule",
]
