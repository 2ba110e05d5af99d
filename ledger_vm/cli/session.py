"""
ledger_vm.cli.session
=====================

Shared plumbing for the `ledger-vm` commands: the per-invocation Session kept
on the Typer context, principal parsing, and result rendering.

Every command opens the SQLite store, runs exactly one contract call through
a Host, prints the outcome and closes the store. Exit codes:

  0  call succeeded
  1  contract reverted (problem payload printed)
  2  usage error (bad option, malformed principal, --contract naming a
     namespace that holds another contract kind)
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import typer

from ..runtime.context import ContextError, LedgerEnv, to_bytes
from ..runtime.host import Contract, Deployment, Host
from ..runtime.sqlite_backend import SqliteBackend

log = logging.getLogger("ledger_vm.cli")

EXIT_REVERT = 1


# ----------------- principals -----------------

def parse_principal(text: str) -> bytes:
    """
    "0x…" is decoded as hex; anything else is taken as a UTF-8 label, which
    keeps local experiments readable (`--as alice`).
    """
    text = text.strip()
    if not text:
        raise typer.BadParameter("principal must be non-empty")
    if text.startswith(("0x", "0X")):
        try:
            out = to_bytes(text)
        except ContextError as e:
            raise typer.BadParameter(str(e)) from e
        if not out:
            raise typer.BadParameter("principal must be non-empty")
        return out
    return text.encode("utf-8")


# ----------------- session -----------------

@dataclass
class Session:
    db: Path
    signers: List[bytes] = field(default_factory=list)
    as_json: bool = False
    contract: Optional[bytes] = None
    timestamp: int = 0
    enforce_auth: bool = False

    def address(self, default: str) -> bytes:
        return self.contract if self.contract is not None else default.encode("ascii")

    @contextmanager
    def deployment(self, contract: Contract, default_address: str) -> Iterator[Deployment]:
        backend = SqliteBackend(str(self.db))
        try:
            host = Host(backend, ledger=LedgerEnv(timestamp=self.timestamp))
            try:
                dep = host.deploy(contract, self.address(default_address))
            except ValueError as e:
                raise typer.BadParameter(str(e), param_hint="--contract") from e
            yield dep
        finally:
            backend.close()

    def run(self, contract: Contract, default_address: str, function: str, *args: Any) -> Any:
        """Run one call, print the outcome and exit non-zero on revert."""
        with self.deployment(contract, default_address) as dep:
            log.info("%s.%s on %s", contract.KIND, function, self.db)
            envelope = dep.run(function, *args, signers=self.signers)
        render(envelope, as_json=self.as_json)
        if not envelope["ok"]:
            raise typer.Exit(EXIT_REVERT)
        return envelope["return"]


def get_session(ctx: typer.Context) -> Session:
    obj = ctx.obj
    if not isinstance(obj, Session):
        raise typer.BadParameter("CLI session not initialized")
    return obj


def now_ts() -> int:
    return int(time.time())


# ----------------- output -----------------

def render(envelope: Dict[str, Any], *, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(envelope, indent=2, sort_keys=True))
        return
    if not envelope["ok"]:
        err = envelope["error"]
        typer.echo(f"reverted: {err['title']}: {err['detail']}", err=True)
        return
    ret = envelope.get("return")
    if isinstance(ret, dict):
        for k, v in ret.items():
            typer.echo(f"{k}: {json.dumps(v, sort_keys=True)}")
    elif ret is not None:
        typer.echo(str(ret))
    for ev in envelope.get("events", []):
        args = " ".join(f"{a['k']}={a['v']}" for a in ev["args"])
        typer.echo(f"event {ev['name']} {args}".rstrip())


__all__ = [
    "EXIT_REVERT",
    "Session",
    "get_session",
    "now_ts",
    "parse_principal",
    "render",
]
