# -*- coding: utf-8 -*-
"""
ledger_contracts.tests.conftest
===============================

Fixtures for contract tests. Each test gets a fresh in-memory Host with the
three contracts deployed at stable addresses, plus a few stable principals.

Usage (inside a test file):
    def test_flow(vault):
        vault.initialize()
        assert vault.deposit(ALICE, 100) == 100
"""
from __future__ import annotations

from typing import Iterator

import pytest

from ledger_contracts import SeatRegistry, Token, Vault
from ledger_vm.config import load_config
from ledger_vm.runtime.host import Deployment, Host

ALICE = b"\xa1" * 32
BOB = b"\xb0" * 32
CAROL = b"\xc4" * 32

VAULT_ADDR = b"vault-1"
TOKEN_ADDR = b"token-1"
SEATS_ADDR = b"seats-1"


@pytest.fixture(autouse=True)
def _fresh_config() -> Iterator[None]:
    load_config.cache_clear()
    yield
    load_config.cache_clear()


@pytest.fixture
def host() -> Host:
    h = Host()
    h.set_ledger(sequence=1, timestamp=1_700_000_000)
    return h


@pytest.fixture
def vault(host: Host) -> Deployment:
    return host.deploy(Vault(), VAULT_ADDR)


@pytest.fixture
def live_vault(vault: Deployment) -> Deployment:
    vault.initialize()
    return vault


@pytest.fixture
def token(host: Host) -> Deployment:
    return host.deploy(Token(), TOKEN_ADDR)


@pytest.fixture
def seats(host: Host) -> Deployment:
    return host.deploy(SeatRegistry(), SEATS_ADDR)
