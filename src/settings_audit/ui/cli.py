"""Command-line interface router for settings-audit."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Final
from xml.etree import ElementTree

import structlog

from settings_audit.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_redacted,
    load_config,
    load_snapshot,
)
from settings_audit.health import DiagnosticEngine, DiagnosticRecord, Severity
from settings_audit.main import ExitCode
from settings_audit.observability import configure_from_config, correlation_scope
from settings_audit.snapshot import ApplicationMode
from settings_audit.ui.render import CLIRenderer, create_renderer
from settings_audit.values import ActionValue, ParseError

_XML_SUFFIXES: Final[frozenset[str]] = frozenset({".xml"})

logger = structlog.get_logger(__name__)


class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    def __init__(self, message: str, exit_code: int = int(ExitCode.CONFIG_ERROR)) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router."""

    parser = argparse.ArgumentParser(
        prog="settings-audit",
        description=(
            "settings-audit — configuration health checks and action value tooling.\n\n"
            "Common workflows:\n"
            "  settings-audit audit --snapshot snapshot.toml   Report configuration findings\n"
            "  settings-audit actions validate actions.json    Validate an action value\n"
            "  settings-audit config                           Show effective config\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to settings-audit TOML config (default: ./settings-audit.toml if present).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Show detailed output.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # audit ---------------------------------------------------------------
    audit_parser = subparsers.add_parser(
        "audit",
        parents=[common],
        help="Audit a configuration snapshot and report findings",
        description=(
            "Run every configuration health check against a snapshot document.\n\n"
            "Examples:\n"
            "  settings-audit audit --snapshot snapshot.toml\n"
            "  settings-audit audit --locale de --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    audit_parser.add_argument("--snapshot", default=None, help="Snapshot TOML document")
    audit_parser.add_argument("--locale", default=None, help="Locale for rendered findings")
    audit_parser.add_argument(
        "--mode",
        choices=[mode.value for mode in ApplicationMode],
        default=ApplicationMode.RUNNING.value,
        help="Application mode the snapshot was taken in (default: RUNNING).",
    )
    audit_parser.add_argument(
        "--fail-on",
        choices=("INFO", "WARN", "SEVERE", "never"),
        default=None,
        help="Lowest severity that produces a non-zero exit (default from config).",
    )
    audit_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    audit_parser.set_defaults(handler=_cmd_audit)

    # actions -------------------------------------------------------------
    actions_parser = subparsers.add_parser(
        "actions",
        help="Inspect persisted action values",
        description=(
            "Validate or display an action value stored as a JSON array or as a\n"
            "persisted XML setting element.\n\n"
            "Examples:\n"
            "  settings-audit actions validate actions.json --required\n"
            "  settings-audit actions show setting.xml --api\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    actions_sub = actions_parser.add_subparsers(dest="actions_command", required=True)

    validate_parser = actions_sub.add_parser(
        "validate", parents=[common], help="Validate an action value"
    )
    validate_parser.add_argument("file", help="JSON array or XML setting element")
    validate_parser.add_argument(
        "--required", action="store_true", help="Treat an empty value as invalid"
    )
    validate_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    validate_parser.set_defaults(handler=_cmd_actions_validate)

    show_parser = actions_sub.add_parser("show", parents=[common], help="Display an action value")
    show_parser.add_argument("file", help="JSON array or XML setting element")
    show_parser.add_argument(
        "--api", action="store_true", help="Emit the API representation with certificate facts"
    )
    show_parser.set_defaults(handler=_cmd_actions_show)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show effective configuration (redacted)",
        description=(
            "Display the effective config after merging defaults, file, and env.\n"
            "Sensitive values are redacted.\n\n"
            "Examples:\n"
            "  settings-audit config\n"
            "  settings-audit config --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return int(ExitCode.CONFIG_ERROR)

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_audit(args: argparse.Namespace) -> int:
    snapshot_override = _optional_str(getattr(args, "snapshot", None))
    overrides: dict[str, object] = {
        "audit.snapshot_path": (
            str(Path(snapshot_override).expanduser().resolve()) if snapshot_override else None
        ),
        "audit.fail_on": _optional_str(getattr(args, "fail_on", None)),
    }
    config = _load_effective_config(args, overrides)
    audit_section = _mapping(config.get("audit"))

    snapshot_path = str(audit_section.get("snapshot_path", ""))
    locale = _optional_str(getattr(args, "locale", None)) or str(
        audit_section.get("default_locale", "")
    )
    fail_on = str(audit_section.get("fail_on", "WARN"))
    mode = ApplicationMode(args.mode)

    with correlation_scope(snapshot=snapshot_path, locale=locale):
        try:
            snapshot = load_snapshot(snapshot_path)
        except ConfigLoadError as exc:
            raise CLIError(str(exc)) from exc

        engine = DiagnosticEngine()
        records = engine.audit_application(snapshot, mode, locale)
        logger.info("audit_completed", findings=len(records), mode=mode.value)

    exit_code = ExitCode.FINDINGS if _breaches(records, fail_on) else ExitCode.SUCCESS

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "audit",
                "snapshot": snapshot_path,
                "locale": locale,
                "findings": [
                    {**record.to_dict(), "message": record.render(engine.catalog)}
                    for record in records
                ],
            }
        )
        return int(exit_code)

    renderer = _get_renderer(args)
    renderer.kv("Snapshot", snapshot_path)
    renderer.kv("Findings", len(records))
    renderer.table(
        ("SEVERITY", "TOPIC", "MESSAGE"),
        [
            (record.severity.value, record.topic.value, record.render(engine.catalog))
            for record in records
        ],
    )
    return int(exit_code)


def _cmd_actions_validate(args: argparse.Namespace) -> int:
    _load_effective_config(args, {})
    value = _load_action_value(Path(args.file))
    messages = value.validate(required=_flag(args, "required"))

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "actions validate",
                "entries": len(value),
                "valid": not messages,
                "messages": messages,
            }
        )
    else:
        renderer = _get_renderer(args)
        if messages:
            for message in messages:
                renderer.fail(message)
        else:
            renderer.ok(f"{len(value)} action(s) valid")

    return int(ExitCode.FINDINGS if messages else ExitCode.SUCCESS)


def _cmd_actions_show(args: argparse.Namespace) -> int:
    _load_effective_config(args, {})
    value = _load_action_value(Path(args.file))

    if _flag(args, "api"):
        print(json.dumps(value.describe_for_api(), indent=2, sort_keys=True, ensure_ascii=False))
        return int(ExitCode.SUCCESS)

    _get_renderer(args).text(value.describe_for_display())
    return int(ExitCode.SUCCESS)


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args, {})
    redacted = dump_redacted(config)

    if _flag(args, "json"):
        _emit_json({"command": "config", "config": redacted})
        return int(ExitCode.SUCCESS)

    _get_renderer(args).text(json.dumps(redacted, indent=2, sort_keys=True, ensure_ascii=False))
    return int(ExitCode.SUCCESS)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(verbose=_flag(args, "verbose"))


def _load_effective_config(
    args: argparse.Namespace, overrides: Mapping[str, object]
) -> dict[str, object]:
    config_path = _optional_str(getattr(args, "config_path", None))
    try:
        loaded = load_config(config_path, cli_overrides=overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc)) from exc
    configure_from_config(loaded)
    return loaded


def _load_action_value(path: Path) -> ActionValue:
    resolved = path.expanduser().resolve()
    try:
        text = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"unable to read {resolved}: {exc}") from exc

    try:
        if resolved.suffix.lower() in _XML_SUFFIXES:
            return ActionValue.parse_document(ElementTree.fromstring(text))
        return ActionValue.from_json(text)
    except ElementTree.ParseError as exc:
        raise CLIError(f"invalid XML in {resolved}: {exc}") from exc
    except ParseError as exc:
        raise CLIError(f"{resolved}: {exc}") from exc


def _breaches(records: Sequence[DiagnosticRecord], fail_on: str) -> bool:
    if fail_on == "never":
        return False
    threshold = Severity(fail_on).rank
    return any(record.severity.rank >= threshold for record in records)


def _mapping(value: object) -> Mapping[str, object]:
    return value if isinstance(value, Mapping) else {}


def _optional_str(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "run_cli"]
