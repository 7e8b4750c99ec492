"""
settings-audit — package root

File: src/settings_audit/__init__.py
Last updated: 2026-10-17

Purpose
- Typed, immutable action configuration values with backward-compatible parsing,
  and a fault-isolated diagnostic engine that audits a configuration snapshot.

Import boundary
- No side effects at import time: no config loading, no logging setup.
- Subpackages: ``values`` (action values), ``health`` (diagnostics), ``security``
  (redaction, certificate facts), ``config`` (tool config and snapshot loading),
  ``observability`` (structlog setup), ``ui`` (CLI).
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
