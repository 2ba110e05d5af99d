"""
ledger_vm.metrics
-----------------

Prometheus metrics for the ledger host.

Tracks:
- Calls per contract/function and outcome (ok / revert / error).
- Reverts per contract and error code.
- Call latency per contract.

Metrics live on a dedicated CollectorRegistry so embedding applications can
decide whether and where to expose them (`render()` returns the text format).
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

REGISTRY = CollectorRegistry(auto_describe=True)

_NS = "ledger"
_SUB = "vm"


def _m(name: str) -> str:
    return f"{_NS}_{_SUB}_{name}"


CALLS_TOTAL = Counter(
    _m("calls_total"),
    "Contract calls by contract, function and outcome.",
    labelnames=("contract", "function", "outcome"),  # outcome = ok|revert|error
    registry=REGISTRY,
)

REVERTS_TOTAL = Counter(
    _m("reverts_total"),
    "Reverted calls by contract and error code.",
    labelnames=("contract", "code"),
    registry=REGISTRY,
)

_LAT_BUCKETS_FAST = (0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0)

CALL_SECONDS = Histogram(
    _m("call_seconds"),
    "Wall time of one contract call including commit.",
    labelnames=("contract",),
    buckets=_LAT_BUCKETS_FAST,
    registry=REGISTRY,
)


def record_call(contract: str, function: str, *, outcome: str, code: str | None = None) -> None:
    """
    Record one finished call.

    Parameters
    ----------
    contract : str
        Contract kind label (e.g. "vault"); keep it low-cardinality.
    function : str
        Called function name.
    outcome : str
        'ok' | 'revert' | 'error'.
    code : str | None
        Error code for reverts.
    """
    CALLS_TOTAL.labels(contract=contract, function=function, outcome=outcome).inc()
    if outcome == "revert":
        REVERTS_TOTAL.labels(contract=contract, code=code or "REVERT").inc()


@contextmanager
def time_call(contract: str) -> Iterator[None]:
    t0 = time.perf_counter()
    try:
        yield
    finally:
        CALL_SECONDS.labels(contract=contract).observe(max(0.0, time.perf_counter() - t0))


def render() -> bytes:
    """Prometheus text exposition of REGISTRY."""
    return generate_latest(REGISTRY)


__all__ = [
    "REGISTRY",
    "CALLS_TOTAL",
    "REVERTS_TOTAL",
    "CALL_SECONDS",
    "record_call",
    "time_call",
    "render",
]
