# -*- coding: utf-8 -*-
"""
Proportional-share vault
========================

Single-asset vault that issues shares against deposited asset units and
redeems them at the current assets-per-share ratio. The vault only keeps the
books: it does not move the underlying asset, so custody (e.g. a token
`transfer_from` into the vault) is up to the integrating host.

State
-----
One `VaultState` record per deployment, stored as a single canonical CBOR
blob under `K_DATA` and replaced whole on every mutating call:

    total_assets : i128 >= 0
    total_shares : i128 >= 0
    balances     : {principal: i128 >= 0}

Initialization is latched by a separate flag under `K_INIT`.

Invariants (after every successful call)
----------------------------------------
- total_shares == sum(balances.values())
- total_shares == 0  <=>  total_assets == 0
- nothing is negative

Share math (truncating integer division, both directions)
---------------------------------------------------------
    deposit:  shares = amount * total_shares // total_assets   (amount if vault empty)
    withdraw: assets = shares * total_assets // total_shares

Truncation leaves rounding dust in the vault, which accrues to the remaining
shareholders. This matches the deployed behaviour bit for bit.

Public interface
----------------
initialize() -> bool
deposit(user: bytes, amount: int) -> int        # shares minted
withdraw(user: bytes, shares: int) -> int       # assets returned
total_assets() / total_shares() / price_per_share() -> int
balance_of(user: bytes) -> int
is_initialized() -> bool
state() -> VaultState
preview_deposit(amount: int) -> int
preview_redeem(shares: int) -> int

Events
------
b"Initialized" { timestamp: int }
b"Deposit"     { user: bytes, amount: int, shares: int }
b"Withdraw"    { user: bytes, shares: int, assets: int }
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Final, Mapping

from ledger_vm.errors import StorageError
from ledger_vm.runtime.context import CallContext, to_hex
from ledger_vm.runtime.host import Contract, export

from .errors import AlreadyInitialized, InsufficientBalance, NotInitialized
from .stdlib import require_address
from .stdlib.safe_int import (
    I128_MAX,
    i128_add,
    i128_sub,
    mul_div_down,
    require_positive_i128,
)

log = logging.getLogger("ledger_contracts.vault")

K_INIT: Final[bytes] = b"vault:init"
K_DATA: Final[bytes] = b"vault:data"

EVT_INITIALIZED: Final[bytes] = b"Initialized"
EVT_DEPOSIT: Final[bytes] = b"Deposit"
EVT_WITHDRAW: Final[bytes] = b"Withdraw"


# ------------------------------------------------------------------------------
# State record
# ------------------------------------------------------------------------------


def _principal(key: Any) -> bytes:
    if not isinstance(key, (bytes, bytearray)):
        raise TypeError(f"balance key must be bytes, got {type(key).__name__}")
    return bytes(key)


@dataclass(frozen=True)
class VaultState:
    """
    Immutable snapshot of the vault's books.

    `initialized` is not persisted: it is False only for the never-initialized
    sentinel returned when no record exists, so views can tell "no vault yet"
    apart from "initialized but empty".
    """

    total_assets: int = 0
    total_shares: int = 0
    balances: Mapping[bytes, int] = field(default_factory=dict, hash=False)
    initialized: bool = True

    @classmethod
    def empty(cls) -> "VaultState":
        return cls()

    @classmethod
    def never_initialized(cls) -> "VaultState":
        return cls(initialized=False)

    def balance_of(self, user: bytes) -> int:
        return self.balances.get(user, 0)

    def price_per_share(self) -> int:
        if self.total_shares == 0:
            return 0
        return self.total_assets // self.total_shares

    # ---- transitions (pure) ----

    def after_deposit(self, user: bytes, amount: int, shares: int) -> "VaultState":
        balances = dict(self.balances)
        balances[user] = i128_add(balances.get(user, 0), shares)
        return VaultState(
            total_assets=i128_add(self.total_assets, amount),
            total_shares=i128_add(self.total_shares, shares),
            balances=balances,
        )

    def after_withdraw(self, user: bytes, shares: int, assets: int) -> "VaultState":
        balances = dict(self.balances)
        balances[user] = i128_sub(balances.get(user, 0), shares)
        return VaultState(
            total_assets=i128_sub(self.total_assets, assets),
            total_shares=i128_sub(self.total_shares, shares),
            balances=balances,
        )

    # ---- persistence ----

    def to_record(self) -> Dict[str, Any]:
        return {
            "total_assets": self.total_assets,
            "total_shares": self.total_shares,
            "balances": dict(self.balances),
        }

    @classmethod
    def from_record(cls, rec: Any) -> "VaultState":
        try:
            ta = rec["total_assets"]
            ts = rec["total_shares"]
            raw_bal = rec["balances"]
        except (KeyError, TypeError) as e:
            raise StorageError("corrupt vault record", context={"missing": str(e)}) from e
        try:
            balances = {_principal(k): v for k, v in dict(raw_bal).items()}
        except (TypeError, ValueError) as e:
            raise StorageError("corrupt vault record", context={"balances": str(e)}) from e
        for v in (ta, ts, *balances.values()):
            if isinstance(v, bool) or not isinstance(v, int) or v < 0 or v > I128_MAX:
                raise StorageError("corrupt vault record", context={"value": repr(v)})
        return cls(total_assets=ta, total_shares=ts, balances=balances)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view (principals as 0x-hex)."""
        return {
            "initialized": self.initialized,
            "total_assets": self.total_assets,
            "total_shares": self.total_shares,
            "price_per_share": self.price_per_share(),
            "balances": {to_hex(k): v for k, v in sorted(self.balances.items())},
        }


# ------------------------------------------------------------------------------
# Share math
# ------------------------------------------------------------------------------


def shares_for_deposit(state: VaultState, amount: int) -> int:
    """Shares minted for `amount` assets at the current ratio (1:1 when empty)."""
    if state.total_assets > 0 and state.total_shares > 0:
        return mul_div_down(amount, state.total_shares, state.total_assets)
    return amount


def assets_for_redeem(state: VaultState, shares: int) -> int:
    """Assets returned for burning `shares`; 0 when no shares exist."""
    if state.total_shares == 0:
        return 0
    return mul_div_down(shares, state.total_assets, state.total_shares)


# ------------------------------------------------------------------------------
# Contract
# ------------------------------------------------------------------------------


class Vault(Contract):
    """
    The vault contract. One instance can serve any number of deployments; all
    state lives in the deployment's storage namespace.

    enforce_auth: when True, deposit/withdraw require `user` to have
    authorized the call.
    """

    KIND = "vault"

    def __init__(self, *, enforce_auth: bool = False) -> None:
        self.enforce_auth = enforce_auth

    # ---- storage helpers ----

    @staticmethod
    def _read(ctx: CallContext) -> VaultState:
        # The init flag alone decides never-initialized vs initialized.
        if not ctx.storage.get_bool(K_INIT):
            return VaultState.never_initialized()
        rec = ctx.storage.get_record(K_DATA)
        if rec is None:
            log.warning("vault %s: init flag set but no state record; starting from zero",
                        to_hex(ctx.contract))
            return VaultState.empty()
        return VaultState.from_record(rec)

    def _load_for_update(self, ctx: CallContext) -> VaultState:
        if not ctx.storage.get_bool(K_INIT):
            raise NotInitialized()
        return self._read(ctx)

    @staticmethod
    def _store(ctx: CallContext, state: VaultState) -> None:
        ctx.storage.set_record(K_DATA, state.to_record())

    # ---- init ----

    @export
    def initialize(self, ctx: CallContext) -> bool:
        """One-time initializer. Fails with AlreadyInitialized afterwards."""
        if ctx.storage.has(K_INIT):
            raise AlreadyInitialized()

        log.info("initializing vault %s at ledger time %d", to_hex(ctx.contract), ctx.ledger.timestamp)
        state = VaultState.empty()
        ctx.storage.set_bool(K_INIT, True)
        self._store(ctx, state)
        ctx.emit(EVT_INITIALIZED, {"timestamp": ctx.ledger.timestamp})
        return True

    # ---- mutations ----

    @export
    def deposit(self, ctx: CallContext, user: bytes, amount: int) -> int:
        state = self._load_for_update(ctx)
        amount = require_positive_i128(amount)
        user = require_address(user, what="user")
        if self.enforce_auth:
            ctx.require_auth(user)

        shares = shares_for_deposit(state, amount)
        log.debug("deposit user=%s amount=%d shares_to_mint=%d", to_hex(user), amount, shares)
        if shares == 0:
            log.warning("deposit of %d by %s minted zero shares (ratio %d/%d)",
                        amount, to_hex(user), state.total_assets, state.total_shares)

        self._store(ctx, state.after_deposit(user, amount, shares))
        ctx.emit(EVT_DEPOSIT, {"user": user, "amount": amount, "shares": shares})
        return shares

    @export
    def withdraw(self, ctx: CallContext, user: bytes, shares: int) -> int:
        state = self._load_for_update(ctx)
        shares = require_positive_i128(shares, what="shares")
        user = require_address(user, what="user")
        if self.enforce_auth:
            ctx.require_auth(user)

        balance = state.balance_of(user)
        if balance < shares or state.total_shares == 0:
            raise InsufficientBalance(
                "insufficient share balance",
                context={"balance": balance, "requested": shares},
            )

        assets = assets_for_redeem(state, shares)
        log.debug("withdraw user=%s shares=%d assets_to_return=%d", to_hex(user), shares, assets)

        self._store(ctx, state.after_withdraw(user, shares, assets))
        ctx.emit(EVT_WITHDRAW, {"user": user, "shares": shares, "assets": assets})
        return assets

    # ---- views ----

    @export(view=True)
    def total_assets(self, ctx: CallContext) -> int:
        return self._read(ctx).total_assets

    @export(view=True)
    def total_shares(self, ctx: CallContext) -> int:
        return self._read(ctx).total_shares

    @export(view=True)
    def balance_of(self, ctx: CallContext, user: bytes) -> int:
        return self._read(ctx).balance_of(require_address(user, what="user"))

    @export(view=True)
    def price_per_share(self, ctx: CallContext) -> int:
        return self._read(ctx).price_per_share()

    @export(view=True)
    def is_initialized(self, ctx: CallContext) -> bool:
        return ctx.storage.get_bool(K_INIT)

    @export(view=True)
    def state(self, ctx: CallContext) -> VaultState:
        return self._read(ctx)

    @export(view=True)
    def preview_deposit(self, ctx: CallContext, amount: int) -> int:
        return shares_for_deposit(self._read(ctx), require_positive_i128(amount))

    @export(view=True)
    def preview_redeem(self, ctx: CallContext, shares: int) -> int:
        return assets_for_redeem(self._read(ctx), require_positive_i128(shares, what="shares"))


__all__ = [
    "K_INIT",
    "K_DATA",
    "EVT_INITIALIZED",
    "EVT_DEPOSIT",
    "EVT_WITHDRAW",
    "VaultState",
    "shares_for_deposit",
    "assets_for_redeem",
    "Vault",
]
