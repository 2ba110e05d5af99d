from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Mapping, Optional, Sequence

from ..config import load_config
from ..errors import EventError

MAX_KEY_LEN = 64
MAX_BYTES_LEN = 4096
MAX_INT_BITS = 256  # signed range ~[-2^255, 2^255-1]

# Keys must be identifier-like: letters/underscore, then letters/digits/underscore.
_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

ArgValue = Any  # constrained at runtime


@dataclass(frozen=True)
class Event:
    """An event published by a contract call."""

    contract: bytes
    name: bytes
    args: Dict[str, ArgValue]


@dataclass(frozen=True)
class CanonicalEvent:
    """
    JSON-friendly event representation for receipts and CLI output:

        contract: "0x" + hex-encoded namespace
        name: event name decoded as ASCII
        args: sequence of {"k", "t", "v"} dicts
              t="b" => bytes encoded as 0x-prefixed hex
              t="i" => integer
              t="z" => boolean
    """

    contract: str
    name: str
    args: Sequence[Mapping[str, Any]]


def _check_name(name: Any) -> bytes:
    if not isinstance(name, (bytes, bytearray)):
        raise EventError("event name must be bytes", context={"where": "name_type"})
    b = bytes(name)
    if len(b) == 0:
        raise EventError("event name must be non-empty", context={"where": "name_empty"})
    if len(b) > load_config().max_event_name_bytes:
        raise EventError("event name too long", context={"where": "name_length", "len": len(b)})
    return b


def _check_key(key: Any) -> str:
    if isinstance(key, (bytes, bytearray)):
        try:
            key = bytes(key).decode("ascii")
        except UnicodeDecodeError:
            raise EventError("event key must be ASCII", context={"where": "key_ascii"}) from None
    if not isinstance(key, str):
        raise EventError("event key must be str", context={"where": "key_type"})
    if not key or len(key) > MAX_KEY_LEN:
        raise EventError("event key length out of range", context={"where": "key_length"})
    if not _KEY_RE.match(key):
        raise EventError(
            "event key has invalid characters", context={"where": "key_grammar", "key": key}
        )
    return key


def _check_value(value: Any) -> ArgValue:
    if isinstance(value, (bytes, bytearray)):
        b = bytes(value)
        if len(b) > MAX_BYTES_LEN:
            raise EventError(
                "event bytes arg too long", context={"where": "value_bytes_length", "len": len(b)}
            )
        return b
    if isinstance(value, bool):
        # bool is a subclass of int, so check it before int.
        return value
    if isinstance(value, int):
        if value.bit_length() > MAX_INT_BITS:
            raise EventError(
                "event int arg out of range",
                context={"where": "value_int_bits", "bits": value.bit_length()},
            )
        return int(value)
    raise EventError(
        "unsupported event arg type",
        context={"where": "value_type", "py_type": type(value).__name__},
    )


class EventSink:
    """
    Validated event log with per-call buffering.

    Events emitted during a call sit in a pending buffer; the host publishes
    them with `commit()` when the call succeeds and drops them with
    `revert()` when it fails.

    Only the newest `max_retained` published events are kept (default from
    `max_retained_events` in the config); older ones fall off the front.
    """

    def __init__(self, max_retained: Optional[int] = None) -> None:
        if max_retained is None:
            max_retained = load_config().max_retained_events
        if max_retained < 1:
            raise ValueError("max_retained must be >= 1")
        self._published: Deque[Event] = deque(maxlen=max_retained)
        self._pending: Optional[List[Event]] = None

    def begin(self) -> None:
        self._pending = []

    def commit(self) -> List[Event]:
        pending, self._pending = self._pending or [], None
        self._published.extend(pending)
        return pending

    def revert(self) -> None:
        self._pending = None

    def emit(self, contract: bytes, name: bytes, args: Mapping[Any, Any]) -> None:
        if self._pending is None:
            raise EventError("event emitted outside of a call", context={"where": "no_call"})
        bname = _check_name(name)
        if not isinstance(args, Mapping):
            raise EventError("event args must be a mapping", context={"where": "args_type"})
        if len(self._pending) >= load_config().max_events_per_call:
            raise EventError("too many events in one call", context={"where": "call_limit"})

        checked: Dict[str, ArgValue] = {}
        for raw_k, raw_v in args.items():
            checked[_check_key(raw_k)] = _check_value(raw_v)
        self._pending.append(Event(bytes(contract), bname, checked))

    def events(self, contract: Optional[bytes] = None) -> List[Event]:
        """Published events, optionally filtered to one contract."""
        if contract is None:
            return list(self._published)
        return [e for e in self._published if e.contract == contract]


def canonical(ev: Event) -> CanonicalEvent:
    enc_args: List[Dict[str, Any]] = []
    for k, v in ev.args.items():
        if isinstance(v, (bytes, bytearray)):
            enc_args.append({"k": k, "t": "b", "v": "0x" + bytes(v).hex()})
        elif isinstance(v, bool):
            enc_args.append({"k": k, "t": "z", "v": v})
        else:
            enc_args.append({"k": k, "t": "i", "v": int(v)})
    return CanonicalEvent(
        contract="0x" + ev.contract.hex(),
        name=ev.name.decode("ascii", errors="replace"),
        args=tuple(enc_args),
    )


__all__ = [
    "Event",
    "CanonicalEvent",
    "EventSink",
    "canonical",
    "MAX_KEY_LEN",
    "MAX_BYTES_LEN",
    "MAX_INT_BITS",
]
