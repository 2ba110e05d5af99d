"""
ledger_vm.runtime.storage_api: keyed persistent store used by contracts.

Design goals
------------
- Deterministic: pure functions over (namespace, key, value) with no wall-clock.
- Simple default: in-process memory backend for local runs & tests.
- Pluggable: a tiny backend interface so the host can swap in a durable DB
  (see ledger_vm.runtime.sqlite_backend).
- Safe: strict byte-length caps; typed helpers for common int/bool use.

Every deployment gets its own namespace (the contract address), so several
contracts can share one backend without key collisions.

Backend API
-----------
- get(ns, key) -> Optional[bytes]
- set(ns, key, value) -> None
- delete(ns, key) -> None
- exists(ns, key) -> bool
- apply_batch(writes) -> None     # {(ns, key): value-or-None}, all-or-nothing
- items(ns) -> Iterator[(key, value)]

Contract-facing API (KeyedStore)
--------------------------------
- has(key) / get(key, default) / set(key, value) / remove(key)
- get_int / set_int / get_bool / set_bool / get_record / set_record
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Iterator, Mapping, Optional, Protocol, Tuple, runtime_checkable

from ..config import load_config
from ..errors import StorageError
from . import codec

SlotKey = Tuple[bytes, bytes]


# ---------------------------- Backend API ---------------------------- #


@runtime_checkable
class StorageBackend(Protocol):
    """Minimal backend interface for namespaced contract storage."""

    def get(self, ns: bytes, key: bytes) -> Optional[bytes]: ...
    def set(self, ns: bytes, key: bytes, value: bytes) -> None: ...
    def delete(self, ns: bytes, key: bytes) -> None: ...
    def exists(self, ns: bytes, key: bytes) -> bool: ...
    def apply_batch(self, writes: Mapping[SlotKey, Optional[bytes]]) -> None: ...
    def items(self, ns: bytes) -> Iterator[Tuple[bytes, bytes]]: ...


class MemoryBackend:
    """Thread-safe in-memory backend for local runs and tests."""

    def __init__(self) -> None:
        self._store: Dict[SlotKey, bytes] = {}
        self._lock = threading.RLock()

    def get(self, ns: bytes, key: bytes) -> Optional[bytes]:
        with self._lock:
            return self._store.get((ns, key))

    def set(self, ns: bytes, key: bytes, value: bytes) -> None:
        with self._lock:
            self._store[(ns, key)] = value

    def delete(self, ns: bytes, key: bytes) -> None:
        with self._lock:
            self._store.pop((ns, key), None)

    def exists(self, ns: bytes, key: bytes) -> bool:
        with self._lock:
            return (ns, key) in self._store

    def apply_batch(self, writes: Mapping[SlotKey, Optional[bytes]]) -> None:
        with self._lock:
            for slot, value in writes.items():
                if value is None:
                    self._store.pop(slot, None)
                else:
                    self._store[slot] = value

    def items(self, ns: bytes) -> Iterator[Tuple[bytes, bytes]]:
        with self._lock:
            snapshot = sorted((k, v) for (n, k), v in self._store.items() if n == ns)
        return iter(snapshot)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


# --------------------------- Validation helpers --------------------------- #

# Keys under this prefix belong to the host (e.g. the deployed contract kind).
RESERVED_PREFIX: bytes = b"\x00"
KIND_KEY: bytes = RESERVED_PREFIX + b"kind"


def _check_key(key: Any) -> bytes:
    if not isinstance(key, (bytes, bytearray)):
        raise StorageError("storage key must be bytes", context={"py_type": type(key).__name__})
    if len(key) == 0:
        raise StorageError("storage key must be non-empty")
    if key.startswith(RESERVED_PREFIX):
        raise StorageError("storage key prefix 0x00 is reserved for the host")
    limit = load_config().max_storage_key_bytes
    if len(key) > limit:
        raise StorageError(f"storage key too long (>{limit} bytes)", context={"len": len(key)})
    return bytes(key)


def _check_value(value: Any) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise StorageError(
            "storage value must be bytes", context={"py_type": type(value).__name__}
        )
    limit = load_config().max_storage_value_bytes
    if len(value) > limit:
        raise StorageError(f"storage value too large (>{limit} bytes)", context={"len": len(value)})
    return bytes(value)


# --------------------------- Contract-facing API --------------------------- #


class KeyedStore:
    """
    The keyed store a contract sees: one namespace over a backend or journal.

    `source` is anything with the backend's get/set/delete/exists shape; the
    host passes its Journal so writes stay staged until the call commits.
    """

    def __init__(self, source: StorageBackend, namespace: bytes) -> None:
        if not namespace:
            raise StorageError("storage namespace must be non-empty")
        self._src = source
        self._ns = bytes(namespace)

    @property
    def namespace(self) -> bytes:
        return self._ns

    def has(self, key: bytes) -> bool:
        return self._src.exists(self._ns, _check_key(key))

    def get(self, key: bytes, default: Optional[bytes] = None) -> Optional[bytes]:
        """Return the value for `key`, or `default` if not set."""
        v = self._src.get(self._ns, _check_key(key))
        return default if v is None else v

    def set(self, key: bytes, value: bytes) -> None:
        """Set `key` to `value` (overwrites existing)."""
        self._src.set(self._ns, _check_key(key), _check_value(value))

    def remove(self, key: bytes) -> None:
        """Delete `key` if present (no-op otherwise)."""
        self._src.delete(self._ns, _check_key(key))

    # ------------------------------ Typed helpers ----------------------------- #

    def get_int(self, key: bytes, default: int = 0, *, signed: bool = False) -> int:
        raw = self.get(key)
        if raw is None:
            return default
        return codec.decode_int(raw, signed=signed)

    def set_int(self, key: bytes, value: int, *, width: int = 16, signed: bool = False) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise StorageError("set_int value must be int")
        self.set(key, codec.encode_int(value, width=width, signed=signed))

    def get_bool(self, key: bytes, default: bool = False) -> bool:
        raw = self.get(key)
        if raw is None:
            return default
        return codec.decode_bool(raw)

    def set_bool(self, key: bytes, flag: bool) -> None:
        self.set(key, codec.encode_bool(flag))

    def get_record(self, key: bytes) -> Optional[Any]:
        raw = self.get(key)
        if raw is None:
            return None
        return codec.loads(raw)

    def set_record(self, key: bytes, record: Any) -> None:
        self.set(key, codec.dumps_canonical(record))


__all__ = ["StorageBackend", "MemoryBackend", "KeyedStore", "SlotKey", "KIND_KEY", "RESERVED_PREFIX"]
