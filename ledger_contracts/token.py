# -*- coding: utf-8 -*-
"""
Fungible token ledger
=====================

Minimal fungible token with balances, allowances and delegated transfers.
Callers are explicit: every mutating entrypoint names the principal whose
authorization it needs, and the host's auth oracle decides.

Public interface
----------------
# metadata / views
name() -> bytes                  # b"undefined" until initialized
symbol() -> bytes                # b"undefined" until initialized
decimals() -> int                # 0 until initialized
total_supply() -> int
balance_of(addr: bytes) -> int
allowance(owner: bytes, spender: bytes) -> int
contract_address() -> bytes

# state-changing
initialize(name: bytes, symbol: bytes, decimals: int,
           initial_supply: int, owner: bytes) -> bool
transfer(from_: bytes, to: bytes, amount: int) -> bool              # auth: from_
approve(owner: bytes, spender: bytes, amount: int) -> bool          # auth: owner
transfer_from(spender: bytes, from_: bytes, to: bytes, amount: int) -> bool  # auth: spender

Events
------
b"Transfer"     { from: bytes, to: bytes, amount: int }
b"Approval"     { owner: bytes, spender: bytes, amount: int }
b"TransferFrom" { spender: bytes, from: bytes, to: bytes, amount: int }

Notes
-----
- Amounts are u128. Zero amounts are accepted and still emit events.
- Balances and allowances are stored as 16-byte big-endian integers.
- `transfer_from` debits the allowance before checking the balance; a failed
  balance check reverts the whole call, debit included.
"""

from __future__ import annotations

import logging
from typing import Final

from ledger_vm.runtime.context import CallContext, to_hex
from ledger_vm.runtime.host import Contract, export
from ledger_vm.runtime.storage_api import KeyedStore

from .errors import AllowanceExceeded, AlreadyInitialized, InsufficientBalance, InvalidAddress
from .stdlib import ZERO_ADDR, require_address
from .stdlib.safe_int import require_u128, u128_add, u128_sub

log = logging.getLogger("ledger_contracts.token")

# ------------------------------------------------------------------------------
# Storage keys
# ------------------------------------------------------------------------------

K_NAME: Final[bytes] = b"tok:meta:name"
K_SYMBOL: Final[bytes] = b"tok:meta:symbol"
K_DECIMALS: Final[bytes] = b"tok:meta:dec"
K_SUPPLY: Final[bytes] = b"tok:meta:supply"

BAL_PREFIX: Final[bytes] = b"tok:bal:"
ALLOW_PREFIX: Final[bytes] = b"tok:allow:"

EVT_TRANSFER: Final[bytes] = b"Transfer"
EVT_APPROVAL: Final[bytes] = b"Approval"
EVT_TRANSFER_FROM: Final[bytes] = b"TransferFrom"

UNDEFINED: Final[bytes] = b"undefined"


def key_balance(addr: bytes) -> bytes:
    return BAL_PREFIX + require_address(addr)


def key_allow(owner: bytes, spender: bytes) -> bytes:
    """Allowance key; the owner's length byte keeps (owner, spender) pairs distinct."""
    owner = require_address(owner, what="owner")
    spender = require_address(spender, what="spender")
    if len(owner) > 255:
        raise InvalidAddress("owner address longer than 255 bytes", context={"len": len(owner)})
    return ALLOW_PREFIX + bytes([len(owner)]) + owner + spender


# ------------------------------------------------------------------------------
# Balance helpers
# ------------------------------------------------------------------------------


def _spend(store: KeyedStore, owner: bytes, amount: int) -> None:
    key = key_balance(owner)
    current = store.get_int(key)
    if current < amount:
        raise InsufficientBalance(context={"balance": current, "requested": amount})
    store.set_int(key, u128_sub(current, amount))


def _credit(store: KeyedStore, owner: bytes, amount: int) -> None:
    key = key_balance(owner)
    store.set_int(key, u128_add(store.get_int(key), amount))


class Token(Contract):
    KIND = "token"

    # ---- init ----

    @export
    def initialize(
        self,
        ctx: CallContext,
        name: bytes,
        symbol: bytes,
        decimals: int,
        initial_supply: int,
        owner: bytes,
    ) -> bool:
        if ctx.storage.has(K_NAME):
            raise AlreadyInitialized()
        decimals = require_u128(decimals, what="decimals")
        initial_supply = require_u128(initial_supply, what="initial_supply")
        owner = require_address(owner, what="owner")

        s = ctx.storage
        s.set(K_NAME, name)
        s.set(K_SYMBOL, symbol)
        s.set_int(K_DECIMALS, decimals)
        s.set_int(K_SUPPLY, initial_supply)
        s.set_int(key_balance(owner), initial_supply)

        log.info("token %s initialized: supply=%d owner=%s", to_hex(ctx.contract), initial_supply, to_hex(owner))
        ctx.emit(EVT_TRANSFER, {"from": ZERO_ADDR, "to": owner, "amount": initial_supply})
        return True

    # ---- views ----

    @export(view=True)
    def name(self, ctx: CallContext) -> bytes:
        return ctx.storage.get(K_NAME, UNDEFINED)

    @export(view=True)
    def symbol(self, ctx: CallContext) -> bytes:
        return ctx.storage.get(K_SYMBOL, UNDEFINED)

    @export(view=True)
    def decimals(self, ctx: CallContext) -> int:
        return ctx.storage.get_int(K_DECIMALS)

    @export(view=True)
    def total_supply(self, ctx: CallContext) -> int:
        return ctx.storage.get_int(K_SUPPLY)

    @export(view=True)
    def balance_of(self, ctx: CallContext, addr: bytes) -> int:
        return ctx.storage.get_int(key_balance(addr))

    @export(view=True)
    def allowance(self, ctx: CallContext, owner: bytes, spender: bytes) -> int:
        return ctx.storage.get_int(key_allow(owner, spender))

    @export(view=True)
    def contract_address(self, ctx: CallContext) -> bytes:
        return ctx.contract

    # ---- mutations ----

    @export
    def transfer(self, ctx: CallContext, from_: bytes, to: bytes, amount: int) -> bool:
        from_ = require_address(from_, what="from")
        to = require_address(to, what="to")
        amount = require_u128(amount)
        ctx.require_auth(from_)

        _spend(ctx.storage, from_, amount)
        _credit(ctx.storage, to, amount)

        ctx.emit(EVT_TRANSFER, {"from": from_, "to": to, "amount": amount})
        return True

    @export
    def approve(self, ctx: CallContext, owner: bytes, spender: bytes, amount: int) -> bool:
        amount = require_u128(amount)
        key = key_allow(owner, spender)
        ctx.require_auth(owner)

        ctx.storage.set_int(key, amount)
        ctx.emit(EVT_APPROVAL, {"owner": owner, "spender": spender, "amount": amount})
        return True

    @export
    def transfer_from(
        self, ctx: CallContext, spender: bytes, from_: bytes, to: bytes, amount: int
    ) -> bool:
        """
        `spender` moves `amount` from `from_` to `to` against its allowance.
        """
        to = require_address(to, what="to")
        amount = require_u128(amount)
        allow_key = key_allow(from_, spender)
        ctx.require_auth(spender)

        current = ctx.storage.get_int(allow_key)
        if current < amount:
            raise AllowanceExceeded(context={"allowance": current, "requested": amount})
        ctx.storage.set_int(allow_key, current - amount)

        _spend(ctx.storage, from_, amount)
        _credit(ctx.storage, to, amount)

        ctx.emit(
            EVT_TRANSFER_FROM,
            {"spender": spender, "from": from_, "to": to, "amount": amount},
        )
        return True


__all__ = [
    "K_NAME",
    "K_SYMBOL",
    "K_DECIMALS",
    "K_SUPPLY",
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    "EVT_TRANSFER_FROM",
    "key_balance",
    "key_allow",
    "Token",
]
