"""
ledger_vm.cli.vault_cli: `ledger-vm vault ...`

Usage
-----
ledger-vm vault init
ledger-vm --as alice vault deposit alice 100
ledger-vm --as alice vault withdraw alice 40
ledger-vm vault show [alice]
ledger-vm vault --enforce-auth deposit alice 100   # require --as alice
"""

from __future__ import annotations

from typing import Optional

import typer

from ledger_contracts.vault import Vault

from .session import get_session, parse_principal

app = typer.Typer(no_args_is_help=True, add_completion=False, help="Proportional-share vault")

DEFAULT_ADDRESS = "vault"


@app.callback()
def _vault(
    ctx: typer.Context,
    enforce_auth: bool = typer.Option(
        False, "--enforce-auth", help="Require the depositor/withdrawer to sign (--as)"
    ),
) -> None:
    get_session(ctx).enforce_auth = enforce_auth


def _contract(ctx: typer.Context) -> Vault:
    return Vault(enforce_auth=get_session(ctx).enforce_auth)


@app.command("init")
def init(ctx: typer.Context) -> None:
    """Initialize an empty vault."""
    get_session(ctx).run(_contract(ctx), DEFAULT_ADDRESS, "initialize")


@app.command("deposit")
def deposit(
    ctx: typer.Context,
    user: str = typer.Argument(..., help="Depositor principal (0x-hex or label)"),
    amount: int = typer.Argument(..., help="Asset units to deposit"),
) -> None:
    """Deposit assets and mint shares at the current ratio."""
    get_session(ctx).run(_contract(ctx), DEFAULT_ADDRESS, "deposit", parse_principal(user), amount)


@app.command("withdraw")
def withdraw(
    ctx: typer.Context,
    user: str = typer.Argument(..., help="Shareholder principal (0x-hex or label)"),
    shares: int = typer.Argument(..., help="Shares to burn"),
) -> None:
    """Burn shares and return the proportional assets."""
    get_session(ctx).run(_contract(ctx), DEFAULT_ADDRESS, "withdraw", parse_principal(user), shares)


@app.command("show")
def show(
    ctx: typer.Context,
    user: Optional[str] = typer.Argument(None, help="Show only this principal's share balance"),
) -> None:
    """Print vault totals and balances, or one principal's balance."""
    session = get_session(ctx)
    if user is None:
        session.run(_contract(ctx), DEFAULT_ADDRESS, "state")
    else:
        session.run(_contract(ctx), DEFAULT_ADDRESS, "balance_of", parse_principal(user))


__all__ = ["app"]
