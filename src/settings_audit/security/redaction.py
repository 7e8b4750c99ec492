"""
settings-audit — secret redaction utilities

File: src/settings_audit/security/redaction.py
Last updated: 2026-10-17

Purpose
- Mask credential material before it reaches logs, CLI dumps, or diagnostic output.

What is covered
- Key-based redaction for nested mappings (``password``, ``authorization``,
  ``proxyPassword`` and friends, camelCase and snake_case alike).
- Pattern-based redaction for free text (private key blocks, HTTP authorization
  headers, ``password=...`` assignments, JWTs).

Non-functional requirements
- Deterministic and idempotent: redacting already-redacted output is a no-op.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

REDACTED_VALUE: Final[str] = "***REDACTED***"

DEFAULT_SENSITIVE_KEY_DENYLIST: Final[frozenset[str]] = frozenset(
    {
        "api_key",
        "authorization",
        "bind_password",
        "client_secret",
        "cookie",
        "credential",
        "credentials",
        "passwd",
        "password",
        "private_key",
        "proxy_password",
        "secret",
        "set_cookie",
        "token",
    }
)

_SENSITIVE_KEY_SUFFIXES: Final[tuple[str, ...]] = (
    "_password",
    "_passwd",
    "_secret",
    "_token",
    "_private_key",
    "_api_key",
)

_CAMEL_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True, slots=True)
class _TextRule:
    name: str
    pattern: re.Pattern[str]
    sensitive_group: int | None = None


_TEXT_RULES: Final[tuple[_TextRule, ...]] = (
    _TextRule(
        name="private_key_block",
        pattern=re.compile(
            r"-----BEGIN(?: [A-Z0-9]+)* PRIVATE KEY-----"
            r"[\s\S]+?"
            r"-----END(?: [A-Z0-9]+)* PRIVATE KEY-----"
        ),
    ),
    _TextRule(
        name="authorization_header",
        pattern=re.compile(
            r"(?i)(\bauthorization\"?\s*[:=]\s*\"?(?:bearer|basic)\s+)"
            r"([^\s\",;]{4,})"
        ),
        sensitive_group=2,
    ),
    _TextRule(
        name="explicit_secret_assignment",
        pattern=re.compile(
            r"(?i)(\b(?:password|passwd|secret|api[_-]?key|client[_-]?secret|token)\b"
            r"\"?\s*[:=]\s*[\"']?)"
            r"(?!\*\*\*REDACTED)([^\s\"',;]{4,})"
        ),
        sensitive_group=2,
    ),
    _TextRule(
        name="jwt",
        pattern=re.compile(r"\beyJ[A-Za-z0-9_-]{8,}\.[A-Za-z0-9_-]{8,}\.[A-Za-z0-9_-]{8,}\b"),
    ),
)


@dataclass(frozen=True, slots=True)
class RedactionConfig:
    """Policy that controls key and text redaction."""

    replacement: str = REDACTED_VALUE
    key_denylist: frozenset[str] = DEFAULT_SENSITIVE_KEY_DENYLIST
    key_allowlist: frozenset[str] = frozenset()


DEFAULT_REDACTION_CONFIG: Final[RedactionConfig] = RedactionConfig()


def is_sensitive_key(key: str, *, config: RedactionConfig | None = None) -> bool:
    """Return whether values stored under ``key`` must be masked."""

    resolved = config if config is not None else DEFAULT_REDACTION_CONFIG
    normalized = normalize_key(key)
    if not normalized or normalized in resolved.key_allowlist:
        return False
    if normalized in resolved.key_denylist:
        return True
    return any(normalized.endswith(suffix) for suffix in _SENSITIVE_KEY_SUFFIXES)


def redact_text(text: str, *, config: RedactionConfig | None = None) -> str:
    """Mask secret-like substrings of ``text``."""

    if not isinstance(text, str):
        raise TypeError(f"text must be a string, got {type(text).__name__}")
    resolved = config if config is not None else DEFAULT_REDACTION_CONFIG
    redacted = text
    for rule in _TEXT_RULES:
        redacted = rule.pattern.sub(
            lambda match, rule=rule: _replace(match, rule.sensitive_group, resolved.replacement),
            redacted,
        )
    return redacted


def redact_structure(value: object, *, config: RedactionConfig | None = None) -> object:
    """Return a deep-redacted copy of nested mappings, lists, and strings."""

    resolved = config if config is not None else DEFAULT_REDACTION_CONFIG
    return _redact(value, resolved)


def normalize_key(key: str) -> str:
    with_boundaries = _CAMEL_CASE_BOUNDARY.sub(r"\1_\2", key.strip())
    return _NON_ALNUM.sub("_", with_boundaries.lower()).strip("_")


def _redact(value: object, config: RedactionConfig) -> object:
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return redact_text(value, config=config)
    if isinstance(value, Mapping):
        out: dict[object, object] = {}
        for key, item in value.items():
            if isinstance(key, str) and is_sensitive_key(key, config=config) and item is not None:
                out[key] = config.replacement
            else:
                out[key] = _redact(item, config)
        return out
    if isinstance(value, (list, tuple)):
        items = [_redact(item, config) for item in value]
        return items if isinstance(value, list) else tuple(items)
    return value


def _replace(match: re.Match[str], group: int | None, replacement: str) -> str:
    if group is None:
        return replacement
    full = match.group(0)
    start, end = match.span(group)
    offset_start = start - match.start(0)
    offset_end = end - match.start(0)
    return f"{full[:offset_start]}{replacement}{full[offset_end:]}"


__all__ = [
    "DEFAULT_REDACTION_CONFIG",
    "DEFAULT_SENSITIVE_KEY_DENYLIST",
    "REDACTED_VALUE",
    "RedactionConfig",
    "is_sensitive_key",
    "normalize_key",
    "redact_structure",
    "redact_text",
]
