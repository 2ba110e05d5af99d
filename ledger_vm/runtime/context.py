"""
ledger_vm.runtime.context: what a contract sees during one call.

`LedgerEnv` is the deterministic ledger metadata (sequence number and close
timestamp) the host supplies; contracts may log or record it but never read a
wall clock. `CallContext` bundles everything a single call may touch:

- contract: the deployment's address, which is also its storage namespace
- storage:  the KeyedStore view, staged in the host's journal
- auth:     the authorization oracle for this call
- ledger:   LedgerEnv
- emit():   publish an event (buffered until the call commits)

Design notes
------------
- Addresses are raw bytes. Hex strings (with or without "0x") are accepted by
  helpers and normalized to bytes.
- All numeric fields are validated to be non-negative.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Union

from .auth_api import AuthOracle
from .events_api import EventSink
from .storage_api import KeyedStore


# ----------------------------- helpers ----------------------------- #

class ContextError(Exception):
    """Validation or coercion failure for LedgerEnv and addresses."""


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: Union[bytes, bytearray, memoryview, str]) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise ContextError(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise ContextError(f"invalid hex string: {value!r}") from e
    raise ContextError(f"cannot convert type {type(value).__name__} to bytes")


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def _require_non_negative_int(name: str, v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise ContextError(f"{name} must be int, got {type(v).__name__}")
    if v < 0:
        raise ContextError(f"{name} must be non-negative, got {v}")
    return v


# ----------------------------- models ------------------------------ #

@dataclass(frozen=True)
class LedgerEnv:
    """
    Deterministic ledger metadata for the current call.

    Fields
    ------
    sequence:   Ledger sequence number (0-based).
    timestamp:  Ledger close time (seconds since epoch).
    """
    sequence: int = 0
    timestamp: int = 0

    def __post_init__(self) -> None:
        _require_non_negative_int("sequence", self.sequence)
        _require_non_negative_int("timestamp", self.timestamp)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "LedgerEnv":
        return cls(
            sequence=_require_non_negative_int("sequence", d.get("sequence", 0)),
            timestamp=_require_non_negative_int("timestamp", d.get("timestamp", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CallContext:
    contract: bytes
    storage: KeyedStore
    auth: AuthOracle
    ledger: LedgerEnv
    sink: EventSink

    def require_auth(self, principal: bytes) -> None:
        self.auth.require_auth(principal)

    def emit(self, name: bytes, args: Mapping[Any, Any]) -> None:
        self.sink.emit(self.contract, name, args)


__all__ = [
    "ContextError",
    "to_bytes",
    "to_hex",
    "LedgerEnv",
    "CallContext",
]
