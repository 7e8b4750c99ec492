"""Public observability primitives: structlog configuration and correlation scopes."""

from settings_audit.observability.logging import (
    configure_from_config,
    configure_logging,
    correlation_scope,
    redact_event,
)

__all__ = [
    "configure_from_config",
    "configure_logging",
    "correlation_scope",
    "redact_event",
]
