"""
ledger_vm.runtime.codec

Canonical value encodings for the keyed store.

- Composite values (records, maps) are canonical CBOR via cbor2. Canonical
  mode sorts map keys by their encoded bytes (RFC 8949 §4.2.1), so the same
  record always produces the same blob regardless of dict insertion order.
- Scalar integers are fixed-width big-endian so that the width itself
  documents the numeric domain (16 bytes for 128-bit amounts, 4 for u32).

Public API
----------
- dumps_canonical(obj) -> bytes
- loads(data) -> Any
- encode_int(n, *, width, signed) -> bytes
- decode_int(data, *, signed) -> int
- encode_bool(flag) -> bytes / decode_bool(data) -> bool
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from typing import Any

import cbor2

from ..errors import StorageError


def _canon_obj(obj: Any) -> Any:
    """
    Normalize dataclasses to dicts and tuples to lists, recursively. Dict key
    ordering is left to cbor2's canonical mode.
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        obj = asdict(obj)
    if isinstance(obj, dict):
        return {k: _canon_obj(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_canon_obj(x) for x in obj]
    return obj


def dumps_canonical(obj: Any) -> bytes:
    """Encode `obj` as canonical CBOR."""
    try:
        return cbor2.dumps(_canon_obj(obj), canonical=True)
    except cbor2.CBOREncodeError as e:
        raise StorageError(f"value is not CBOR-encodable: {e}") from e


def loads(data: bytes) -> Any:
    """Decode a CBOR blob written by `dumps_canonical`."""
    try:
        return cbor2.loads(bytes(data))
    except cbor2.CBORDecodeError as e:
        raise StorageError(f"corrupt CBOR value: {e}") from e


def encode_int(n: int, *, width: int = 16, signed: bool = False) -> bytes:
    """Fixed-width big-endian integer."""
    try:
        return int(n).to_bytes(width, "big", signed=signed)
    except OverflowError as e:
        raise StorageError(
            f"integer does not fit {width * 8}-bit {'signed' if signed else 'unsigned'}",
            context={"value": int(n)},
        ) from e


def decode_int(data: bytes, *, signed: bool = False) -> int:
    return int.from_bytes(bytes(data), "big", signed=signed)


def encode_bool(flag: bool) -> bytes:
    return b"\x01" if flag else b"\x00"


def decode_bool(data: bytes) -> bool:
    return bytes(data) not in (b"", b"\x00")


__all__ = [
    "dumps_canonical",
    "loads",
    "encode_int",
    "decode_int",
    "encode_bool",
    "decode_bool",
]
