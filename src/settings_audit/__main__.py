"""Module entrypoint for ``python -m settings_audit``."""

from __future__ import annotations

from settings_audit.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
