# -*- coding: utf-8 -*-
"""
Seat registry
=============

Non-fungible seat tokens: each u32 seat number has at most one owner and each
principal holds at most one seat, so the mapping is kept in both directions.

Storage
-------
seat:meta:name / seat:meta:symbol / seat:meta:admin   registry metadata
seat:owner:<u32be seat>                                owner address
seat:of:<addr>                                         seat number (u32)

Events
------
b"Mint"     { to: bytes, seat: int }
b"Transfer" { from: bytes, to: bytes, seat: int }
"""

from __future__ import annotations

import logging
from typing import Final

from ledger_vm.runtime.context import CallContext, to_hex
from ledger_vm.runtime.host import Contract, export

from .errors import (
    AlreadyInitialized,
    AlreadyOwned,
    InvalidSeat,
    NotFound,
    ReceiverAlreadyHolds,
    SenderDoesNotOwn,
)
from .stdlib import require_address
from .stdlib.safe_int import U32_MAX

log = logging.getLogger("ledger_contracts.seats")

K_NAME: Final[bytes] = b"seat:meta:name"
K_SYMBOL: Final[bytes] = b"seat:meta:symbol"
K_ADMIN: Final[bytes] = b"seat:meta:admin"

OWNER_PREFIX: Final[bytes] = b"seat:owner:"
SEAT_PREFIX: Final[bytes] = b"seat:of:"

EVT_MINT: Final[bytes] = b"Mint"
EVT_TRANSFER: Final[bytes] = b"Transfer"


def require_seat(seat: object) -> int:
    if isinstance(seat, bool) or not isinstance(seat, int) or not 0 <= seat <= U32_MAX:
        raise InvalidSeat(context={"seat": repr(seat)})
    return seat


def key_owner(seat: int) -> bytes:
    return OWNER_PREFIX + require_seat(seat).to_bytes(4, "big")


def key_seat(addr: bytes) -> bytes:
    return SEAT_PREFIX + require_address(addr)


class SeatRegistry(Contract):
    KIND = "seats"

    @export
    def initialize(self, ctx: CallContext, name: bytes, symbol: bytes, admin: bytes) -> None:
        if ctx.storage.has(K_ADMIN):
            raise AlreadyInitialized("registry already has an admin")
        admin = require_address(admin, what="admin")
        ctx.storage.set(K_NAME, name)
        ctx.storage.set(K_SYMBOL, symbol)
        ctx.storage.set(K_ADMIN, admin)
        log.info("seat registry %s initialized, admin=%s", to_hex(ctx.contract), to_hex(admin))

    @export
    def mint(self, ctx: CallContext, to: bytes, seat: int) -> None:
        owner_key = key_owner(seat)
        seat_key = key_seat(to)
        if ctx.storage.has(owner_key):
            raise AlreadyOwned(context={"seat": seat})
        if ctx.storage.has(seat_key):
            raise ReceiverAlreadyHolds(context={"to": to})

        ctx.storage.set(owner_key, bytes(to))
        ctx.storage.set_int(seat_key, seat, width=4)
        ctx.emit(EVT_MINT, {"to": to, "seat": seat})

    @export
    def transfer(self, ctx: CallContext, from_: bytes, to: bytes, seat: int) -> None:
        owner_key = key_owner(seat)
        from_key = key_seat(from_)
        to_key = key_seat(to)
        ctx.require_auth(from_)

        if ctx.storage.has(to_key):
            raise ReceiverAlreadyHolds(context={"to": to})
        held = ctx.storage.get(from_key)
        if held is None or int.from_bytes(held, "big") != seat:
            raise SenderDoesNotOwn(context={"from": from_, "seat": seat})

        ctx.storage.remove(from_key)
        ctx.storage.set(owner_key, bytes(to))
        ctx.storage.set_int(to_key, seat, width=4)
        ctx.emit(EVT_TRANSFER, {"from": from_, "to": to, "seat": seat})

    # ---- views ----

    @export(view=True)
    def owner_of(self, ctx: CallContext, seat: int) -> bytes:
        owner = ctx.storage.get(key_owner(seat))
        if owner is None:
            raise NotFound(f"seat {seat} has no owner", context={"seat": seat})
        return owner

    @export(view=True)
    def seat_of(self, ctx: CallContext, owner: bytes) -> int:
        raw = ctx.storage.get(key_seat(owner))
        if raw is None:
            raise NotFound("principal holds no seat", context={"owner": owner})
        return int.from_bytes(raw, "big")

    @export(view=True)
    def name(self, ctx: CallContext) -> bytes:
        return ctx.storage.get(K_NAME, b"")

    @export(view=True)
    def symbol(self, ctx: CallContext) -> bytes:
        return ctx.storage.get(K_SYMBOL, b"")

    @export(view=True)
    def admin(self, ctx: CallContext) -> bytes:
        admin = ctx.storage.get(K_ADMIN)
        if admin is None:
            raise NotFound("registry has no admin")
        return admin


__all__ = [
    "K_NAME",
    "K_SYMBOL",
    "K_ADMIN",
    "EVT_MINT",
    "EVT_TRANSFER",
    "require_seat",
    "key_owner",
    "key_seat",
    "SeatRegistry",
]
