"""
ledger_vm.cli.token_cli: `ledger-vm token ...`

Usage
-----
ledger-vm token init "My Token" MTK 7 1000 alice
ledger-vm --as alice token transfer alice bob 10
ledger-vm --as alice token approve alice carol 50
ledger-vm --as carol token transfer-from carol alice bob 20
ledger-vm token balance bob
ledger-vm token allowance alice carol
"""

from __future__ import annotations

import typer

from ledger_contracts.token import Token

from .session import get_session, parse_principal

app = typer.Typer(no_args_is_help=True, add_completion=False, help="Fungible token ledger")

DEFAULT_ADDRESS = "token"
_TOKEN = Token()


@app.command("init")
def init(
    ctx: typer.Context,
    name: str = typer.Argument(...),
    symbol: str = typer.Argument(...),
    decimals: int = typer.Argument(...),
    supply: int = typer.Argument(..., help="Initial supply credited to OWNER"),
    owner: str = typer.Argument(...),
) -> None:
    """Set metadata and mint the initial supply to OWNER."""
    get_session(ctx).run(
        _TOKEN,
        DEFAULT_ADDRESS,
        "initialize",
        name.encode("utf-8"),
        symbol.encode("utf-8"),
        decimals,
        supply,
        parse_principal(owner),
    )


@app.command("transfer")
def transfer(
    ctx: typer.Context,
    from_: str = typer.Argument(..., metavar="FROM"),
    to: str = typer.Argument(...),
    amount: int = typer.Argument(...),
) -> None:
    """Move AMOUNT from FROM to TO (FROM must sign)."""
    get_session(ctx).run(
        _TOKEN, DEFAULT_ADDRESS, "transfer", parse_principal(from_), parse_principal(to), amount
    )


@app.command("approve")
def approve(
    ctx: typer.Context,
    owner: str = typer.Argument(...),
    spender: str = typer.Argument(...),
    amount: int = typer.Argument(...),
) -> None:
    """Set SPENDER's allowance over OWNER's balance (OWNER must sign)."""
    get_session(ctx).run(
        _TOKEN, DEFAULT_ADDRESS, "approve", parse_principal(owner), parse_principal(spender), amount
    )


@app.command("transfer-from")
def transfer_from(
    ctx: typer.Context,
    spender: str = typer.Argument(...),
    from_: str = typer.Argument(..., metavar="FROM"),
    to: str = typer.Argument(...),
    amount: int = typer.Argument(...),
) -> None:
    """Spend allowance: SPENDER moves AMOUNT from FROM to TO (SPENDER must sign)."""
    get_session(ctx).run(
        _TOKEN,
        DEFAULT_ADDRESS,
        "transfer_from",
        parse_principal(spender),
        parse_principal(from_),
        parse_principal(to),
        amount,
    )


@app.command("balance")
def balance(ctx: typer.Context, addr: str = typer.Argument(...)) -> None:
    get_session(ctx).run(_TOKEN, DEFAULT_ADDRESS, "balance_of", parse_principal(addr))


@app.command("allowance")
def allowance(
    ctx: typer.Context,
    owner: str = typer.Argument(...),
    spender: str = typer.Argument(...),
) -> None:
    get_session(ctx).run(
        _TOKEN, DEFAULT_ADDRESS, "allowance", parse_principal(owner), parse_principal(spender)
    )


__all__ = ["app"]
