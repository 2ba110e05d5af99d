"""
ledger_vm.cli.seats_cli: `ledger-vm seats ...`

Usage
-----
ledger-vm seats init "Tour 2026" TOUR admin
ledger-vm seats mint alice 12
ledger-vm --as alice seats transfer alice bob 12
ledger-vm seats owner 12
"""

from __future__ import annotations

import typer

from ledger_contracts.seats import SeatRegistry

from .session import get_session, parse_principal

app = typer.Typer(no_args_is_help=True, add_completion=False, help="Seat NFT registry")

DEFAULT_ADDRESS = "seats"
_SEATS = SeatRegistry()


@app.command("init")
def init(
    ctx: typer.Context,
    name: str = typer.Argument(...),
    symbol: str = typer.Argument(...),
    admin: str = typer.Argument(...),
) -> None:
    get_session(ctx).run(
        _SEATS,
        DEFAULT_ADDRESS,
        "initialize",
        name.encode("utf-8"),
        symbol.encode("utf-8"),
        parse_principal(admin),
    )


@app.command("mint")
def mint(
    ctx: typer.Context,
    to: str = typer.Argument(...),
    seat: int = typer.Argument(...),
) -> None:
    get_session(ctx).run(_SEATS, DEFAULT_ADDRESS, "mint", parse_principal(to), seat)


@app.command("transfer")
def transfer(
    ctx: typer.Context,
    from_: str = typer.Argument(..., metavar="FROM"),
    to: str = typer.Argument(...),
    seat: int = typer.Argument(...),
) -> None:
    """Hand SEAT from FROM to TO (FROM must sign)."""
    get_session(ctx).run(
        _SEATS, DEFAULT_ADDRESS, "transfer", parse_principal(from_), parse_principal(to), seat
    )


@app.command("owner")
def owner(ctx: typer.Context, seat: int = typer.Argument(...)) -> None:
    get_session(ctx).run(_SEATS, DEFAULT_ADDRESS, "owner_of", seat)


__all__ = ["app"]
