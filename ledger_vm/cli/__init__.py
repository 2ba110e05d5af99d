"""
ledger_vm.cli
-------------
Command-line entrypoint for running ledger contracts against a local SQLite
store:

- vault   : init / deposit / withdraw / show
- token   : init / transfer / approve / transfer-from / balance / allowance
- seats   : init / mint / transfer / owner
- version : print the package version

Global options come before the group:

  ledger-vm [--db PATH] [--as PRINCIPAL]... [--json] [--contract ADDR] <group> ...

Each group keeps its deployment under its own namespace (default: the group
name) so one database file can hold a vault, a token and a seat registry side
by side.

Usage:
  python -m ledger_vm.cli vault init
  ledger-vm --as alice vault deposit alice 100
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from ..config import load_config
from ..version import __version__
from . import seats_cli, token_cli, vault_cli
from .session import Session, now_ts, parse_principal

__all__ = ["build_app", "main", "__version__"]


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"ledger-vm {__version__}")
        raise typer.Exit(0)


def build_app() -> typer.Typer:
    """Build and return the root Typer app."""
    app = typer.Typer(
        name="ledger-vm",
        help="Run vault, token and seat contracts against a local store",
        no_args_is_help=True,
        add_completion=False,
    )

    @app.callback()
    def _root(
        ctx: typer.Context,
        db: Optional[Path] = typer.Option(
            None, "--db", help="SQLite database path (default: $LEDGER_VM_DB or ./ledger.db)"
        ),
        signers: Optional[List[str]] = typer.Option(
            None, "--as", help="Principal that authorizes this call (repeatable)"
        ),
        as_json: bool = typer.Option(False, "--json", help="Print the result envelope as JSON"),
        contract: Optional[str] = typer.Option(
            None, "--contract", help="Deployment address (0x-hex or label)"
        ),
        timestamp: Optional[int] = typer.Option(
            None, "--timestamp", min=0, help="Ledger timestamp seen by the contract (default: now)"
        ),
        log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ..."),
        version: bool = typer.Option(
            False,
            "--version",
            "-V",
            help="Print version and exit",
            is_eager=True,
            callback=_print_version,
        ),
    ) -> None:
        cfg = load_config()
        level = (log_level or cfg.log_level).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise typer.BadParameter(f"unknown log level {log_level!r}", param_hint="--log-level")
        logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

        ctx.obj = Session(
            db=db if db is not None else cfg.db_path,
            signers=[parse_principal(s) for s in signers or []],
            as_json=as_json,
            contract=parse_principal(contract) if contract is not None else None,
            timestamp=now_ts() if timestamp is None else timestamp,
        )

    @app.command("version")
    def _version() -> None:
        """Print the package version."""
        typer.echo(__version__)

    app.add_typer(vault_cli.app, name="vault")
    app.add_typer(token_cli.app, name="token")
    app.add_typer(seats_cli.app, name="seats")
    return app


def main(argv: Optional[List[str]] = None) -> int:
    """
    Console-script entrypoint. Returns the process exit code.
    """
    app = build_app()
    # Typer exits via SystemExit: 0 ok, 1 revert, 2 usage error.
    app(args=argv, prog_name="ledger-vm")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
