from __future__ import annotations

"""
SQLite storage backend
======================

Durable keyed store for the CLI and for hosts that want deployments to survive
a restart. One table holds every deployment, keyed by (namespace, key).

Design notes
------------
- Single-writer, many-reader friendly via WAL.
- Schema versioned in a `meta` table and created on open().
- A committed call checkpoint arrives as one `apply_batch()` and is written in
  one IMMEDIATE transaction, so a crash never leaves half a call on disk.

Example
-------
    backend = SqliteBackend("ledger.db")
    host = Host(backend)
"""

import contextlib
import logging
import sqlite3
import threading
from typing import Iterator, Mapping, Optional, Tuple

from .storage_api import SlotKey

log = logging.getLogger("ledger_vm.runtime.sqlite_backend")


class SqliteBackend:
    """
    Tiny SQLite keyed store.

    Thread-safe for simple concurrent access via an internal RLock.
    """

    SCHEMA_VERSION = 1

    def __init__(self, path: str) -> None:
        """
        Open or create the SQLite database.

        `path` may be a filesystem path, ":memory:", or a URI
        (e.g. "file:ledger.db?mode=rwc").
        """
        uri = path.startswith("file:")
        self._db = sqlite3.connect(
            path,
            uri=uri,
            check_same_thread=False,
            isolation_level=None,  # autocommit; we manage transactions
        )
        self._lock = threading.RLock()
        self._apply_pragmas()
        with self.tx():
            self._migrate()
        log.debug("opened sqlite store %s", path)

    # -- lifecycle -------------------------------------------------------------

    def close(self) -> None:
        with self._lock:
            self._db.close()

    def __enter__(self) -> "SqliteBackend":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @contextlib.contextmanager
    def tx(self) -> Iterator[None]:
        """
        Transaction context manager.

        Usage:
            with backend.tx():
                ...
        """
        with self._lock:
            self._db.execute("BEGIN IMMEDIATE")
            try:
                yield
            except BaseException:
                self._db.execute("ROLLBACK")
                raise
            self._db.execute("COMMIT")

    def _apply_pragmas(self) -> None:
        cur = self._db.cursor()
        cur.execute("PRAGMA journal_mode=WAL")
        cur.execute("PRAGMA synchronous=NORMAL")
        cur.execute("PRAGMA temp_store=MEMORY")
        cur.close()

    def _migrate(self) -> None:
        cur = self._db.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS meta (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )
        cur.execute("SELECT value FROM meta WHERE key='schema_version'")
        row = cur.fetchone()
        if not row:
            cur.execute(
                "INSERT INTO meta(key, value) VALUES('schema_version', ?)",
                (str(self.SCHEMA_VERSION),),
            )
        elif int(row[0]) != self.SCHEMA_VERSION:
            raise RuntimeError(
                f"unsupported ledger store schema {row[0]} (expected {self.SCHEMA_VERSION})"
            )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                ns    BLOB NOT NULL,
                k     BLOB NOT NULL,
                v     BLOB NOT NULL,
                PRIMARY KEY (ns, k)
            ) WITHOUT ROWID
            """
        )
        cur.close()

    # -- backend API -----------------------------------------------------------

    def get(self, ns: bytes, key: bytes) -> Optional[bytes]:
        with self._lock:
            row = self._db.execute("SELECT v FROM kv WHERE ns=? AND k=?", (ns, key)).fetchone()
        return bytes(row[0]) if row else None

    def set(self, ns: bytes, key: bytes, value: bytes) -> None:
        with self.tx():
            self._upsert(ns, key, value)

    def delete(self, ns: bytes, key: bytes) -> None:
        with self.tx():
            self._db.execute("DELETE FROM kv WHERE ns=? AND k=?", (ns, key))

    def exists(self, ns: bytes, key: bytes) -> bool:
        return self.get(ns, key) is not None

    def apply_batch(self, writes: Mapping[SlotKey, Optional[bytes]]) -> None:
        with self.tx():
            for (ns, key), value in writes.items():
                if value is None:
                    self._db.execute("DELETE FROM kv WHERE ns=? AND k=?", (ns, key))
                else:
                    self._upsert(ns, key, value)

    def items(self, ns: bytes) -> Iterator[Tuple[bytes, bytes]]:
        with self._lock:
            rows = self._db.execute("SELECT k, v FROM kv WHERE ns=? ORDER BY k", (ns,)).fetchall()
        return iter([(bytes(k), bytes(v)) for k, v in rows])

    def namespaces(self) -> list[bytes]:
        with self._lock:
            rows = self._db.execute("SELECT DISTINCT ns FROM kv ORDER BY ns").fetchall()
        return [bytes(r[0]) for r in rows]

    def _upsert(self, ns: bytes, key: bytes, value: bytes) -> None:
        self._db.execute(
            "INSERT INTO kv(ns, k, v) VALUES(?, ?, ?) "
            "ON CONFLICT(ns, k) DO UPDATE SET v=excluded.v",
            (ns, key, value),
        )


__all__ = ["SqliteBackend"]
