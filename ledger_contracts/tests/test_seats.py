from __future__ import annotations

import pytest

from ledger_contracts.errors import (
    AlreadyInitialized,
    AlreadyOwned,
    InvalidSeat,
    NotFound,
    ReceiverAlreadyHolds,
    SenderDoesNotOwn,
)
from ledger_contracts.seats import key_owner
from ledger_contracts.stdlib.safe_int import U32_MAX
from ledger_vm.errors import Unauthorized

from .conftest import ALICE, BOB, CAROL


@pytest.fixture
def live_seats(seats):
    seats.initialize(b"Tour 2026", b"TOUR", CAROL)
    return seats


def test_initialize_once(live_seats) -> None:
    assert live_seats.name() == b"Tour 2026"
    assert live_seats.symbol() == b"TOUR"
    assert live_seats.admin() == CAROL
    with pytest.raises(AlreadyInitialized):
        live_seats.initialize(b"x", b"y", BOB)
    assert live_seats.admin() == CAROL


def test_admin_before_initialize(seats) -> None:
    with pytest.raises(NotFound):
        seats.admin()


def test_mint_maps_both_ways(live_seats) -> None:
    live_seats.mint(ALICE, 12)
    assert live_seats.owner_of(12) == ALICE
    assert live_seats.seat_of(ALICE) == 12
    ev = live_seats.events[-1]
    assert ev.name == b"Mint"
    assert ev.args == {"to": ALICE, "seat": 12}


def test_mint_taken_seat(live_seats) -> None:
    live_seats.mint(ALICE, 1)
    with pytest.raises(AlreadyOwned):
        live_seats.mint(BOB, 1)
    with pytest.raises(NotFound):
        live_seats.seat_of(BOB)


def test_mint_to_holder(live_seats) -> None:
    live_seats.mint(ALICE, 1)
    with pytest.raises(ReceiverAlreadyHolds):
        live_seats.mint(ALICE, 2)
    with pytest.raises(NotFound):
        live_seats.owner_of(2)


@pytest.mark.parametrize("bad", [-1, U32_MAX + 1, True, "3"])
def test_invalid_seat_numbers(live_seats, bad) -> None:
    with pytest.raises(InvalidSeat):
        live_seats.mint(ALICE, bad)
    with pytest.raises(InvalidSeat):
        live_seats.owner_of(bad)


def test_seat_bounds(live_seats) -> None:
    live_seats.mint(ALICE, 0)
    live_seats.mint(BOB, U32_MAX)
    assert live_seats.owner_of(U32_MAX) == BOB
    assert key_owner(U32_MAX).endswith(b"\xff\xff\xff\xff")


def test_owner_of_unknown(live_seats) -> None:
    with pytest.raises(NotFound):
        live_seats.owner_of(99)


def test_transfer(live_seats, host) -> None:
    live_seats.mint(ALICE, 5)
    live_seats.transfer(ALICE, BOB, 5, signers=[ALICE])
    assert live_seats.owner_of(5) == BOB
    assert live_seats.seat_of(BOB) == 5
    with pytest.raises(NotFound):
        live_seats.seat_of(ALICE)
    assert host.last_call.auths == [ALICE]
    assert live_seats.events[-1].args == {"from": ALICE, "to": BOB, "seat": 5}


def test_transfer_requires_auth(live_seats) -> None:
    live_seats.mint(ALICE, 5)
    with pytest.raises(Unauthorized):
        live_seats.transfer(ALICE, BOB, 5, signers=[BOB])
    assert live_seats.owner_of(5) == ALICE


def test_transfer_to_holder_rejected(live_seats) -> None:
    live_seats.mint(ALICE, 5)
    live_seats.mint(BOB, 6)
    with pytest.raises(ReceiverAlreadyHolds):
        live_seats.transfer(ALICE, BOB, 5, signers=[ALICE])


def test_transfer_by_non_holder(live_seats) -> None:
    live_seats.mint(ALICE, 5)
    with pytest.raises(SenderDoesNotOwn):
        live_seats.transfer(CAROL, BOB, 5, signers=[CAROL])


def test_transfer_of_someone_elses_seat(live_seats) -> None:
    live_seats.mint(ALICE, 5)
    live_seats.mint(CAROL, 6)
    with pytest.raises(SenderDoesNotOwn):
        live_seats.transfer(CAROL, BOB, 5, signers=[CAROL])
    assert live_seats.owner_of(5) == ALICE
    assert live_seats.seat_of(CAROL) == 6
