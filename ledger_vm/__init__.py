"""
Ledger host runtime (ledger_vm): package marker and public entrypoints.

This package runs ledger-style contracts (see `ledger_contracts`) against a
keyed persistent store, one atomic call at a time:

- Host(backend=None, *, ledger=None, mock_all_auths=False)
    Owns the store, the write journal, the event sink and the call lock.
- Host.deploy(contract, address) -> Deployment
    Bind a contract object to an address (its storage namespace).
- Deployment.call(fn, *args, signers=()) -> Any
    Execute one entrypoint; commits on success, rolls back on any failure.
- Deployment.run(fn, *args, signers=()) -> dict
    Same, returning {"ok": ..., "return"/"error": ..., "events": [...]}.
"""

from __future__ import annotations

from .errors import EventError, Revert, StorageError, Unauthorized, VmError
from .runtime.host import Contract, Deployment, Host, export
from .version import __version__

__all__ = [
    "__version__",
    "Host",
    "Deployment",
    "Contract",
    "export",
    "VmError",
    "StorageError",
    "EventError",
    "Revert",
    "Unauthorized",
]
