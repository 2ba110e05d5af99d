"""
ledger_vm.runtime.journal: journaling writes, checkpoints, revert/commit.

A deterministic, in-memory write journal layered over a storage backend. It
supports nested checkpoints via a stack of overlays. Writes go to the top
overlay; reads consult overlays from top → base. `commit()` merges the top
overlay into the next layer, or hands it to the backend as one batch when it
is the last one. `revert()` discards the top overlay.

Key properties
--------------
- Pure Python, no I/O of its own; the backend decides durability.
- Overlay per (namespace, key) with explicit deletion markers (None).
- Nested checkpoints (begin/commit/revert) with O(changes) merge cost.
- Presents the same get/set/delete/exists shape as a backend, so a
  `KeyedStore` can sit on top of either.

Intended usage
--------------
    j = Journal(backend)
    j.begin()
    j.set(ns, b"k", b"v")
    j.commit()        # backend.apply_batch({(ns, b"k"): b"v"})
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .storage_api import SlotKey, StorageBackend

_Overlay = Dict[SlotKey, Optional[bytes]]


class Journal:
    """
    A copy-on-write write journal with nested checkpoints.

    Unlike a bare backend, writes made outside any checkpoint are rejected:
    every mutation must belong to a call.
    """

    def __init__(self, backend: StorageBackend) -> None:
        self._backend = backend
        self._layers: List[_Overlay] = []

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    # --------------------------------------------------------------------- #
    # Checkpointing
    # --------------------------------------------------------------------- #

    def depth(self) -> int:
        """Number of open checkpoints (0 when idle)."""
        return len(self._layers)

    def begin(self) -> int:
        """Start a new checkpoint. Returns the new depth marker (int)."""
        self._layers.append({})
        return len(self._layers)

    def commit(self) -> None:
        """
        Commit the top overlay into its parent, or into the backend if it is
        the outermost checkpoint.
        """
        if not self._layers:
            raise RuntimeError("commit without an open checkpoint")
        top = self._layers.pop()
        if self._layers:
            self._layers[-1].update(top)
        elif top:
            self._backend.apply_batch(top)

    def revert(self) -> None:
        """Discard the top overlay."""
        if not self._layers:
            raise RuntimeError("revert without an open checkpoint")
        self._layers.pop()

    def revert_to(self, marker: int) -> None:
        """Revert repeatedly until the current depth equals `marker`."""
        if marker < 0:
            raise ValueError("marker must be >= 0")
        while len(self._layers) > marker:
            self.revert()

    # --------------------------------------------------------------------- #
    # Storage API (backend-shaped)
    # --------------------------------------------------------------------- #

    def get(self, ns: bytes, key: bytes) -> Optional[bytes]:
        slot = (ns, key)
        for layer in reversed(self._layers):
            if slot in layer:
                return layer[slot]
        return self._backend.get(ns, key)

    def exists(self, ns: bytes, key: bytes) -> bool:
        return self.get(ns, key) is not None

    def set(self, ns: bytes, key: bytes, value: bytes) -> None:
        self._top()[(ns, key)] = bytes(value)

    def delete(self, ns: bytes, key: bytes) -> None:
        self._top()[(ns, key)] = None

    def _top(self) -> _Overlay:
        if not self._layers:
            raise RuntimeError("storage write outside of a call checkpoint")
        return self._layers[-1]

    # --------------------------------------------------------------------- #
    # Debug/Introspection
    # --------------------------------------------------------------------- #

    def pending_writes(self) -> int:
        """Total number of staged (ns, key) entries across layers."""
        return sum(len(layer) for layer in self._layers)


__all__ = ["Journal"]
