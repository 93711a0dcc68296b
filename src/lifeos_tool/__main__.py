"""Punto de entrada: python -m lifeos_tool."""

from __future__ import annotations

from lifeos_tool.cli import main as run_cli
from lifeos_tool.session import NoActiveSessionError


def main() -> int:
    """Run CLI entrypoint."""
    try:
        return run_cli()
    except NoActiveSessionError as exc:
        print(f"No hay sesión activa: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
