from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from ledger_vm.errors import Revert
from ledger_vm.runtime.host import Host
from ledger_vm.runtime.sqlite_backend import SqliteBackend

from .conftest import Counter


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "ledger.db")


def test_basic_ops(db_path: str) -> None:
    with SqliteBackend(db_path) as be:
        assert be.get(b"ns", b"k") is None
        be.set(b"ns", b"k", b"v1")
        be.set(b"ns", b"k", b"v2")
        assert be.get(b"ns", b"k") == b"v2"
        assert be.exists(b"ns", b"k")
        be.delete(b"ns", b"k")
        assert not be.exists(b"ns", b"k")


def test_batch_is_atomic(db_path: str) -> None:
    with SqliteBackend(db_path) as be:
        be.set(b"ns", b"keep", b"1")
        with pytest.raises(sqlite3.Error):
            # second entry has a non-bytes namespace that sqlite cannot bind
            be.apply_batch({(b"ns", b"a"): b"1", (object(), b"b"): b"2"})  # type: ignore[dict-item]
        assert be.get(b"ns", b"a") is None
        be.apply_batch({(b"ns", b"a"): b"1", (b"ns", b"keep"): None, (b"other", b"z"): b"9"})
        assert list(be.items(b"ns")) == [(b"a", b"1")]
        assert be.namespaces() == [b"ns", b"other"]


def test_state_survives_reopen(db_path: str) -> None:
    with SqliteBackend(db_path) as be:
        c = Host(be).deploy(Counter(), b"c")
        c.inc()
        c.inc()
    with SqliteBackend(db_path) as be:
        assert Host(be).deploy(Counter(), b"c").get() == 2


def test_failed_call_never_reaches_disk(db_path: str) -> None:
    with SqliteBackend(db_path) as be:
        c = Host(be).deploy(Counter(), b"c")
        with pytest.raises(Revert):
            c.inc_then_fail()
        assert list(be.items(b"c")) == []


def test_in_memory_database() -> None:
    with SqliteBackend(":memory:") as be:
        be.set(b"ns", b"k", b"v")
        assert be.get(b"ns", b"k") == b"v"
