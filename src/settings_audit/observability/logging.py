"""Structured logging setup with JSON or console output and redaction support."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator, Mapping, MutableMapping
from contextlib import contextmanager
from typing import Any, Final, TextIO

import structlog

from settings_audit.security.redaction import redact_structure, redact_text

_DEFAULT_LEVEL: Final[str] = "WARNING"
_LOG_FORMATS: Final[frozenset[str]] = frozenset({"json", "text"})


def configure_logging(
    level: int | str = _DEFAULT_LEVEL,
    fmt: str = "text",
    *,
    redact_secrets: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog for the current process.

    Parameters
    ----------
    level:
        Minimum level, as a stdlib level number or name.
    fmt:
        ``json`` for one JSON object per line, ``text`` for console rendering.
    redact_secrets:
        Mask credential-like fields and substrings before rendering.
    stream:
        Output stream; defaults to ``sys.stderr`` so command output stays clean.
    """

    resolved_level = _parse_log_level(level)
    if fmt not in _LOG_FORMATS:
        raise ValueError(f"unsupported log format {fmt!r}; expected one of: json, text")

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if redact_secrets:
        processors.append(redact_event)
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(resolved_level),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )


def configure_from_config(config: Mapping[str, object]) -> None:
    """Configure logging from the ``[observability]`` section of the tool config."""

    section = config.get("observability")
    observability = section if isinstance(section, Mapping) else {}
    raw_level = observability.get("log_level", _DEFAULT_LEVEL)
    raw_format = observability.get("log_format", "text")
    configure_logging(
        raw_level if isinstance(raw_level, (int, str)) else _DEFAULT_LEVEL,
        raw_format if isinstance(raw_format, str) else "text",
        redact_secrets=bool(observability.get("redact_secrets", True)),
    )


def redact_event(
    logger: object, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor that masks secrets in event fields."""

    redacted = redact_structure(dict(event_dict))
    if not isinstance(redacted, dict):
        return event_dict
    event = redacted.get("event")
    if isinstance(event, str):
        redacted["event"] = redact_text(event)
    return redacted


@contextmanager
def correlation_scope(**fields: str | None) -> Iterator[None]:
    """Temporarily bind correlation fields for log events in scope."""

    bound = {key: value for key, value in fields.items() if value}
    with structlog.contextvars.bound_contextvars(**bound):
        yield


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, int):
        return value

    if not isinstance(value, str):
        raise ValueError(f"level must be int or str, got {type(value).__name__}")

    normalized = value.strip().upper()
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed

    raise ValueError(f"unsupported logging level {value!r}")


__all__ = [
    "configure_from_config",
    "configure_logging",
    "correlation_scope",
    "redact_event",
]
