# -*- coding: utf-8 -*-
"""
ledger_vm.tests.conftest
========================

Fixtures for the host runtime tests:

- `vm_env`   : set LEDGER_VM_* variables for one test (config cache cleared)
- `backend`  : fresh MemoryBackend
- `host`     : Host over `backend`
- `counter`  : a tiny deployed contract that exercises storage, events, auth
               and failure paths without depending on ledger_contracts
"""
from __future__ import annotations

from typing import Callable, Iterator

import pytest

from ledger_vm.config import load_config
from ledger_vm.errors import Revert
from ledger_vm.runtime.host import Contract, Deployment, Host, export
from ledger_vm.runtime.storage_api import MemoryBackend

ALICE = b"alice"
BOB = b"bob"


class Counter(Contract):
    KIND = "counter"

    @export
    def inc(self, ctx, by: int = 1) -> int:
        n = ctx.storage.get_int(b"n") + by
        ctx.storage.set_int(b"n", n)
        ctx.emit(b"Inc", {"n": n})
        return n

    @export
    def inc_then_fail(self, ctx) -> None:
        self.inc(ctx)
        raise Revert("nope")

    @export
    def inc_then_crash(self, ctx) -> None:
        self.inc(ctx)
        raise KeyError("boom")

    @export
    def guarded_inc(self, ctx, who: bytes) -> int:
        ctx.require_auth(who)
        return self.inc(ctx)

    @export(view=True)
    def get(self, ctx) -> int:
        return ctx.storage.get_int(b"n")

    @export(view=True)
    def sneaky_write(self, ctx) -> int:
        ctx.storage.set_int(b"n", 999)
        return 999

    def not_exported(self, ctx) -> None:
        raise AssertionError("must not be callable through the host")


@pytest.fixture(autouse=True)
def _fresh_config() -> Iterator[None]:
    load_config.cache_clear()
    yield
    load_config.cache_clear()


@pytest.fixture
def vm_env(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    def _set(**env: str) -> None:
        for k, v in env.items():
            monkeypatch.setenv(k, v)
        load_config.cache_clear()

    return _set


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def host(backend: MemoryBackend) -> Host:
    return Host(backend)


@pytest.fixture
def counter(host: Host) -> Deployment:
    return host.deploy(Counter(), b"counter-1")
