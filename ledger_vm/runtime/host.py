"""
ledger_vm.runtime.host: runs contract calls one at a time, atomically.

The host owns the storage backend, a write journal over it, the event sink and
one lock. Every call:

  1. takes the lock (calls against the host are serialized),
  2. opens a journal checkpoint and an event buffer,
  3. builds a CallContext for the target deployment and runs the entrypoint,
  4. commits both on normal return, or reverts both on any exception and
     re-raises it.

A failed call is therefore indistinguishable from one that never ran. View
entrypoints always revert their checkpoint, so they cannot write even by
mistake.

The first committed call at an address also records the contract KIND under
a host-reserved key, so strict mode refuses a different kind there even from
a fresh Host over the same backend (as the CLI creates per invocation).

Contracts are plain classes. Methods decorated with `@export` are callable
through the host and receive the CallContext as their first argument:

    class Counter(Contract):
        KIND = "counter"

        @export
        def inc(self, ctx):
            n = ctx.storage.get_int(b"n") + 1
            ctx.storage.set_int(b"n", n)
            return n

    host = Host()
    counter = host.deploy(Counter(), b"counter-1")
    counter.call("inc")
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, ClassVar, Dict, Iterable, List, Optional, TypeVar, overload

from .. import metrics
from ..config import load_config
from ..errors import VmError
from .auth_api import AllowAllAuth, AuthOracle, SignerSetAuth
from .context import CallContext, LedgerEnv, to_hex
from .events_api import Event, EventSink, canonical
from .journal import Journal
from .storage_api import KIND_KEY, KeyedStore, MemoryBackend, StorageBackend

log = logging.getLogger("ledger_vm.runtime.host")

F = TypeVar("F", bound=Callable[..., Any])

_EXPORT_ATTR = "__ledger_export__"


@overload
def export(fn: F) -> F: ...
@overload
def export(*, view: bool = ...) -> Callable[[F], F]: ...


def export(fn: Optional[F] = None, *, view: bool = False) -> Any:
    """Mark a contract method as a callable entrypoint (`view=True`: read-only)."""

    def mark(f: F) -> F:
        setattr(f, _EXPORT_ATTR, {"view": view})
        return f

    if fn is not None:
        return mark(fn)
    return mark


class Contract:
    """Base class for contracts run by the Host."""

    KIND: ClassVar[str] = "contract"

    @classmethod
    def entrypoints(cls) -> Dict[str, Dict[str, Any]]:
        out: Dict[str, Dict[str, Any]] = {}
        for name in dir(cls):
            meta = getattr(getattr(cls, name, None), _EXPORT_ATTR, None)
            if meta is not None:
                out[name] = dict(meta)
        return out


@dataclass
class CallRecord:
    """Outcome of the most recent call, for tests and tooling."""

    contract: bytes
    function: str
    ok: bool
    auths: List[bytes] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)


class Host:
    """
    Per-deployment-set execution host.

    Parameters
    ----------
    backend : StorageBackend | None
        Durable store; defaults to a fresh MemoryBackend.
    ledger : LedgerEnv | None
        Ledger metadata exposed to contracts.
    mock_all_auths : bool
        Treat every principal as authorized (checks are still recorded).
    """

    def __init__(
        self,
        backend: Optional[StorageBackend] = None,
        *,
        ledger: Optional[LedgerEnv] = None,
        mock_all_auths: bool = False,
    ) -> None:
        self.backend: StorageBackend = backend if backend is not None else MemoryBackend()
        self.journal = Journal(self.backend)
        self.sink = EventSink()
        self.ledger = ledger or LedgerEnv()
        self.mock_all_auths = mock_all_auths
        self.last_call: Optional[CallRecord] = None
        self._kinds: Dict[bytes, str] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------ #
    # Deployment
    # ------------------------------------------------------------------ #

    def deploy(self, contract: Contract, address: bytes) -> "Deployment":
        if not isinstance(address, (bytes, bytearray)) or not address:
            raise ValueError("contract address must be non-empty bytes")
        address = bytes(address)
        with self._lock:
            prior = self._kinds.get(address) or self._stored_kind(address)
            if prior is not None and prior != contract.KIND:
                if load_config().strict_mode:
                    raise ValueError(
                        f"address {to_hex(address)} already holds a {prior!r} deployment"
                    )
                log.warning("redeploying %s as %r over %r", to_hex(address), contract.KIND, prior)
            self._kinds[address] = contract.KIND
        return Deployment(self, contract, address)

    def set_ledger(self, *, sequence: Optional[int] = None, timestamp: Optional[int] = None) -> None:
        with self._lock:
            self.ledger = LedgerEnv(
                sequence=self.ledger.sequence if sequence is None else sequence,
                timestamp=self.ledger.timestamp if timestamp is None else timestamp,
            )

    # ------------------------------------------------------------------ #
    # Calls
    # ------------------------------------------------------------------ #

    def invoke(
        self,
        contract: Contract,
        address: bytes,
        function: str,
        *args: Any,
        signers: Iterable[bytes] = (),
    ) -> Any:
        """Run one entrypoint as one atomic call and return its result."""
        meta = contract.entrypoints().get(function)
        if meta is None:
            raise AttributeError(f"{type(contract).__name__} has no entrypoint {function!r}")
        fn = getattr(contract, function)
        kind = contract.KIND

        with self._lock, metrics.time_call(kind):
            if self.journal.depth():
                raise RuntimeError("re-entrant contract call")

            auth: AuthOracle = AllowAllAuth() if self.mock_all_auths else SignerSetAuth(signers)
            record = CallRecord(contract=address, function=function, ok=False)
            self.last_call = record

            marker = self.journal.begin()
            self.sink.begin()
            ctx = CallContext(
                contract=address,
                storage=KeyedStore(self.journal, address),
                auth=auth,
                ledger=self.ledger,
                sink=self.sink,
            )
            try:
                if not meta["view"]:
                    self._pin_kind(address, kind)
                result = fn(ctx, *args)
                if meta["view"]:
                    self._rollback(marker)
                else:
                    self.journal.commit()
            except VmError as e:
                self._rollback(marker)
                record.auths = auth.checked
                metrics.record_call(kind, function, outcome="revert", code=e.code)
                log.debug("%s.%s reverted: %s", kind, function, e)
                raise
            except Exception:
                self._rollback(marker)
                record.auths = auth.checked
                metrics.record_call(kind, function, outcome="error")
                log.exception("%s.%s failed with an unexpected error", kind, function)
                raise

            record.ok = True
            record.auths = auth.checked
            if not meta["view"]:
                record.events = self.sink.commit()
            metrics.record_call(kind, function, outcome="ok")
            return result

    def run_call(
        self,
        contract: Contract,
        address: bytes,
        function: str,
        *args: Any,
        signers: Iterable[bytes] = (),
    ) -> Dict[str, Any]:
        """
        Like `invoke`, but returns a JSON-friendly envelope instead of raising
        on contract failures:

            {"ok": True, "return": <value>, "events": [...]}
            {"ok": False, "error": <problem dict>}
        """
        try:
            ret = self.invoke(contract, address, function, *args, signers=signers)
        except VmError as e:
            return {"ok": False, "error": e.to_problem()}
        events = self.last_call.events if self.last_call else []
        return {
            "ok": True,
            "return": _json_value(ret),
            "events": [_json_value(asdict(canonical(ev))) for ev in events],
        }

    def events(self, address: Optional[bytes] = None) -> List[Event]:
        return self.sink.events(address)

    def _stored_kind(self, address: bytes) -> Optional[str]:
        raw = self.backend.get(address, KIND_KEY)
        return raw.decode("utf-8", errors="replace") if raw else None

    def _pin_kind(self, address: bytes, kind: str) -> None:
        # Staged with the call, so a failed first call pins nothing.
        raw = kind.encode("utf-8")
        if self.journal.get(address, KIND_KEY) != raw:
            self.journal.set(address, KIND_KEY, raw)

    def _rollback(self, marker: int) -> None:
        self.journal.revert_to(marker - 1)
        self.sink.revert()


class Deployment:
    """
    A contract bound to an address on a host. Entrypoints are reachable both
    as `d.call("name", *args)` and as attributes: `d.name(*args, signers=[...])`.
    """

    def __init__(self, host: Host, contract: Contract, address: bytes) -> None:
        self.host = host
        self.contract = contract
        self.address = address

    def call(self, function: str, *args: Any, signers: Iterable[bytes] = ()) -> Any:
        return self.host.invoke(self.contract, self.address, function, *args, signers=signers)

    def run(self, function: str, *args: Any, signers: Iterable[bytes] = ()) -> Dict[str, Any]:
        return self.host.run_call(self.contract, self.address, function, *args, signers=signers)

    @property
    def events(self) -> List[Event]:
        return self.host.events(self.address)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_") or name not in self.contract.entrypoints():
            raise AttributeError(name)

        def _bound(*args: Any, signers: Iterable[bytes] = ()) -> Any:
            return self.call(name, *args, signers=signers)

        _bound.__name__ = name
        return _bound

    def __repr__(self) -> str:
        return f"Deployment({type(self.contract).__name__}, {to_hex(self.address)})"


def _json_value(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray)):
        return "0x" + bytes(obj).hex()
    if isinstance(obj, dict):
        return {str(k): _json_value(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_json_value(x) for x in obj]
    if hasattr(obj, "to_dict"):
        return _json_value(obj.to_dict())
    return obj


__all__ = ["Host", "Deployment", "Contract", "CallRecord", "export"]
