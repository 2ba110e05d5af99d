# -*- coding: utf-8 -*-
"""
Vault behaviour: the five reference scenarios, validation failures, the
truncating share math at non-unit ratios, and the all-or-nothing guarantee.
"""
from __future__ import annotations

import logging
from typing import Dict

import pytest

from ledger_contracts.errors import (
    AlreadyInitialized,
    InsufficientBalance,
    InvalidAddress,
    InvalidAmount,
    NotInitialized,
    Overflow,
)
from ledger_contracts.stdlib.safe_int import I128_MAX
from ledger_contracts.vault import K_DATA, K_INIT, Vault, VaultState
from ledger_vm.errors import StorageError, Unauthorized
from ledger_vm.runtime import codec
from ledger_vm.runtime.host import Deployment, Host

from .conftest import ALICE, BOB, CAROL, VAULT_ADDR


def _seed(host: Host, total_assets: int, total_shares: int, balances: Dict[bytes, int]) -> None:
    """Write a vault record directly, bypassing the contract."""
    host.backend.set(VAULT_ADDR, K_INIT, b"\x01")
    host.backend.set(
        VAULT_ADDR,
        K_DATA,
        codec.dumps_canonical(
            {"total_assets": total_assets, "total_shares": total_shares, "balances": balances}
        ),
    )


def _assert_consistent(v: Deployment) -> None:
    st = v.state()
    assert st.total_shares == sum(st.balances.values())
    assert st.total_assets >= 0 and st.total_shares >= 0
    assert (st.total_shares == 0) == (st.total_assets == 0)


# ---------------------------------------------------------------------------
# Reference scenarios
# ---------------------------------------------------------------------------


def test_scenario_first_deposit_is_one_to_one(live_vault) -> None:
    assert live_vault.deposit(ALICE, 100) == 100
    assert live_vault.total_assets() == 100
    assert live_vault.total_shares() == 100
    assert live_vault.balance_of(ALICE) == 100
    assert live_vault.price_per_share() == 1


def test_scenario_second_depositor(live_vault) -> None:
    live_vault.deposit(ALICE, 100)
    assert live_vault.deposit(BOB, 50) == 50
    assert live_vault.total_assets() == 150
    assert live_vault.total_shares() == 150


def test_scenario_full_withdraw(live_vault) -> None:
    live_vault.deposit(ALICE, 100)
    live_vault.deposit(BOB, 50)
    assert live_vault.withdraw(ALICE, 100) == 100
    assert live_vault.total_assets() == 50
    assert live_vault.total_shares() == 50
    assert live_vault.balance_of(ALICE) == 0
    # The emptied entry stays on record at zero.
    assert live_vault.state().balances[ALICE] == 0
    _assert_consistent(live_vault)


def test_scenario_double_initialize(live_vault) -> None:
    with pytest.raises(AlreadyInitialized):
        live_vault.initialize()


def test_scenario_deposit_before_initialize(vault) -> None:
    with pytest.raises(NotInitialized):
        vault.deposit(ALICE, 100)
    with pytest.raises(NotInitialized):
        vault.withdraw(ALICE, 1)
    assert vault.events == []


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("bad", [0, -1, True, 1.5, "10", I128_MAX + 1])
def test_invalid_amounts(live_vault, bad) -> None:
    with pytest.raises(InvalidAmount):
        live_vault.deposit(ALICE, bad)
    with pytest.raises(InvalidAmount):
        live_vault.withdraw(ALICE, bad)


def test_invalid_user(live_vault) -> None:
    with pytest.raises(InvalidAddress):
        live_vault.deposit(b"", 1)
    with pytest.raises(InvalidAddress):
        live_vault.deposit("alice", 1)


def test_withdraw_more_than_balance(live_vault) -> None:
    live_vault.deposit(ALICE, 10)
    with pytest.raises(InsufficientBalance) as ei:
        live_vault.withdraw(ALICE, 11)
    assert ei.value.context == {"balance": 10, "requested": 11}
    with pytest.raises(InsufficientBalance):
        live_vault.withdraw(BOB, 1)
    assert live_vault.balance_of(ALICE) == 10


def test_withdraw_on_empty_vault(live_vault) -> None:
    with pytest.raises(InsufficientBalance):
        live_vault.withdraw(ALICE, 1)


def test_failed_call_changes_nothing(live_vault) -> None:
    live_vault.deposit(ALICE, 10)
    before = live_vault.state()
    n_events = len(live_vault.events)
    with pytest.raises(InsufficientBalance):
        live_vault.withdraw(ALICE, 50)
    assert live_vault.state() == before
    assert len(live_vault.events) == n_events


def test_overflow_reverts(live_vault) -> None:
    live_vault.deposit(ALICE, I128_MAX)
    with pytest.raises(Overflow):
        live_vault.deposit(BOB, 1)
    assert live_vault.total_assets() == I128_MAX
    assert live_vault.balance_of(BOB) == 0


def test_large_values_use_exact_intermediates(live_vault) -> None:
    big = 1 << 100
    live_vault.deposit(ALICE, big)
    assert live_vault.deposit(BOB, big) == big
    assert live_vault.withdraw(BOB, big) == big


# ---------------------------------------------------------------------------
# Share math at a non-unit ratio
# ---------------------------------------------------------------------------


def test_deposit_truncates_toward_zero(host, vault) -> None:
    _seed(host, 150, 100, {ALICE: 100})
    assert vault.preview_deposit(10) == 6
    assert vault.deposit(BOB, 10) == 6  # 10 * 100 // 150
    assert vault.total_assets() == 160
    assert vault.total_shares() == 106
    _assert_consistent(vault)


def test_withdraw_truncates_toward_zero(host, vault) -> None:
    _seed(host, 150, 100, {ALICE: 100})
    assert vault.preview_redeem(3) == 4
    assert vault.withdraw(ALICE, 3) == 4  # 3 * 150 // 100
    assert vault.total_assets() == 146
    assert vault.total_shares() == 97
    assert vault.price_per_share() == 1


def test_deposit_then_withdraw_never_profits(host, vault) -> None:
    _seed(host, 1000, 333, {ALICE: 333})
    shares = vault.deposit(BOB, 77)
    assert vault.withdraw(BOB, shares) <= 77


def test_zero_share_deposit_is_logged(host, vault, caplog) -> None:
    _seed(host, 1000, 1, {ALICE: 1})
    with caplog.at_level(logging.WARNING, logger="ledger_contracts.vault"):
        assert vault.deposit(BOB, 999) == 0
    assert "minted zero shares" in caplog.text
    assert vault.total_assets() == 1999
    assert vault.balance_of(BOB) == 0


def test_price_per_share(host, vault) -> None:
    _seed(host, 500, 100, {ALICE: 100})
    assert vault.price_per_share() == 5


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def test_events(live_vault) -> None:
    live_vault.deposit(ALICE, 100)
    live_vault.withdraw(ALICE, 40)
    evs = live_vault.events
    assert [e.name for e in evs] == [b"Initialized", b"Deposit", b"Withdraw"]
    assert evs[0].args == {"timestamp": 1_700_000_000}
    assert evs[1].args == {"user": ALICE, "amount": 100, "shares": 100}
    assert evs[2].args == {"user": ALICE, "shares": 40, "assets": 40}


# ---------------------------------------------------------------------------
# Views and initialization state
# ---------------------------------------------------------------------------


def test_never_initialized_reads_as_zero(vault) -> None:
    assert vault.is_initialized() is False
    st = vault.state()
    assert st.initialized is False
    assert st == VaultState.never_initialized()
    assert vault.total_assets() == 0
    assert vault.total_shares() == 0
    assert vault.price_per_share() == 0
    assert vault.balance_of(ALICE) == 0


def test_initialized_empty_is_distinct(live_vault) -> None:
    assert live_vault.is_initialized() is True
    st = live_vault.state()
    assert st.initialized is True
    assert st == VaultState.empty()
    assert st != VaultState.never_initialized()


def test_views_are_idempotent(live_vault) -> None:
    live_vault.deposit(ALICE, 42)
    assert live_vault.state() == live_vault.state()
    assert live_vault.balance_of(ALICE) == live_vault.balance_of(ALICE) == 42


def test_missing_blob_falls_back_to_zero(host, vault, caplog) -> None:
    host.backend.set(VAULT_ADDR, K_INIT, b"\x01")
    # flag set, record missing: initialized and empty, never the sentinel
    assert vault.is_initialized() is True
    assert vault.state() == VaultState.empty()
    assert vault.state().initialized is True
    with caplog.at_level(logging.WARNING, logger="ledger_contracts.vault"):
        assert vault.deposit(ALICE, 5) == 5
    assert "no state record" in caplog.text
    assert vault.total_assets() == 5


def test_corrupt_record_is_a_storage_error(host, vault) -> None:
    host.backend.set(VAULT_ADDR, K_INIT, b"\x01")
    host.backend.set(VAULT_ADDR, K_DATA, codec.dumps_canonical({"total_assets": -1}))
    with pytest.raises(StorageError):
        vault.total_assets()
    with pytest.raises(StorageError):
        vault.deposit(ALICE, 1)


def test_state_to_dict(live_vault) -> None:
    live_vault.deposit(ALICE, 3)
    d = live_vault.state().to_dict()
    assert d == {
        "initialized": True,
        "total_assets": 3,
        "total_shares": 3,
        "price_per_share": 1,
        "balances": {"0x" + ALICE.hex(): 3},
    }


# ---------------------------------------------------------------------------
# Optional authorization
# ---------------------------------------------------------------------------


def test_auth_not_required_by_default(live_vault, host) -> None:
    live_vault.deposit(ALICE, 1)
    assert host.last_call.auths == []


def test_enforce_auth(host) -> None:
    v = host.deploy(Vault(enforce_auth=True), b"guarded")
    v.initialize()
    with pytest.raises(Unauthorized):
        v.deposit(ALICE, 10, signers=[CAROL])
    assert v.deposit(ALICE, 10, signers=[ALICE]) == 10
    with pytest.raises(Unauthorized):
        v.withdraw(ALICE, 10)
    assert v.withdraw(ALICE, 10, signers=[ALICE]) == 10


@pytest.mark.parametrize(
    "balances",
    [{"alice": 1}, {7: 1}, [1, 2], 5],
)
def test_corrupt_balance_keys_are_a_storage_error(host, vault, balances) -> None:
    host.backend.set(VAULT_ADDR, K_INIT, b"\x01")
    host.backend.set(
        VAULT_ADDR,
        K_DATA,
        codec.dumps_canonical({"total_assets": 1, "total_shares": 1, "balances": balances}),
    )
    with pytest.raises(StorageError):
        vault.state()
