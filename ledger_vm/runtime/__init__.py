"""
ledger_vm.runtime
-----------------

Host-side runtime for ledger contracts:

- storage_api    : KeyedStore (has/get/set/remove) over a pluggable backend
- sqlite_backend : durable SqliteBackend
- journal        : per-call write checkpoints
- events_api     : validated, per-call buffered event sink
- auth_api       : authorization oracles
- context        : LedgerEnv, CallContext, address helpers
- host           : Host / Deployment / Contract / @export
- codec          : canonical CBOR and fixed-width integer encodings
"""

from __future__ import annotations

from .auth_api import AllowAllAuth, AuthOracle, SignerSetAuth
from .context import CallContext, LedgerEnv, to_bytes, to_hex
from .events_api import CanonicalEvent, Event, EventSink
from .host import CallRecord, Contract, Deployment, Host, export
from .journal import Journal
from .sqlite_backend import SqliteBackend
from .storage_api import KeyedStore, MemoryBackend, StorageBackend

__all__ = [
    "AllowAllAuth",
    "AuthOracle",
    "SignerSetAuth",
    "CallContext",
    "LedgerEnv",
    "to_bytes",
    "to_hex",
    "CanonicalEvent",
    "Event",
    "EventSink",
    "CallRecord",
    "Contract",
    "Deployment",
    "Host",
    "export",
    "Journal",
    "SqliteBackend",
    "KeyedStore",
    "MemoryBackend",
    "StorageBackend",
]
