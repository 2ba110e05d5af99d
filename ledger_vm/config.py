"""
ledger_vm.config: store caps, event caps, CLI defaults.

This module centralizes configuration for the ledger host runtime. It has
NO third-party deps and is safe to import very early.

Configuration precedence:
  1) Environment variables (LEDGER_VM_*)
  2) Hardcoded safe defaults below

Key env vars (case-insensitive where boolean):
  - LEDGER_VM_STRICT                (bool)   default: true
  - LEDGER_VM_MAX_STORAGE_KEY_BYTES (int)    default: 96
  - LEDGER_VM_MAX_STORAGE_VAL_BYTES (int)    default: 1_048_576 (1 MiB)
  - LEDGER_VM_MAX_EVENT_NAME_BYTES  (int)    default: 64
  - LEDGER_VM_MAX_EVENTS_PER_CALL   (int)    default: 256
  - LEDGER_VM_MAX_RETAINED_EVENTS   (int)    default: 4096
  - LEDGER_VM_DB                    (path)   default: ./ledger.db
  - LEDGER_VM_LOG_LEVEL             (str)    default: WARNING

The vault blob grows with the number of depositors, so the value cap is the
one most likely to need raising.

Usage:
    from ledger_vm.config import load_config
    if load_config().strict_mode: ...

Strict mode pins each deployment address to one contract kind per host.
The host keeps only the newest LEDGER_VM_MAX_RETAINED_EVENTS published events.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# ----------------------------- helpers ---------------------------------------


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "t", "yes", "y", "on")


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_log_level(name: str, default: str) -> str:
    raw = (os.getenv(name) or default).strip().upper()
    if raw not in _LEVELS:
        return default
    return raw


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class VMConfig:
    # Feature flags
    strict_mode: bool

    # Store caps
    max_storage_key_bytes: int
    max_storage_value_bytes: int

    # Event caps
    max_event_name_bytes: int
    max_events_per_call: int
    max_retained_events: int

    # CLI defaults
    db_path: Path
    log_level: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "strict_mode": self.strict_mode,
            "max_storage_key_bytes": self.max_storage_key_bytes,
            "max_storage_value_bytes": self.max_storage_value_bytes,
            "max_event_name_bytes": self.max_event_name_bytes,
            "max_events_per_call": self.max_events_per_call,
            "max_retained_events": self.max_retained_events,
            "db_path": str(self.db_path),
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def load_config() -> VMConfig:
    """
    Build and cache a VMConfig from environment + safe defaults.
    """
    return VMConfig(
        strict_mode=_env_bool("LEDGER_VM_STRICT", True),
        max_storage_key_bytes=_env_int("LEDGER_VM_MAX_STORAGE_KEY_BYTES", 96, min_v=16, max_v=1024),
        max_storage_value_bytes=_env_int(
            "LEDGER_VM_MAX_STORAGE_VAL_BYTES", 1_048_576, min_v=64, max_v=64 * 1_048_576
        ),
        max_event_name_bytes=_env_int("LEDGER_VM_MAX_EVENT_NAME_BYTES", 64, min_v=8, max_v=256),
        max_events_per_call=_env_int("LEDGER_VM_MAX_EVENTS_PER_CALL", 256, min_v=1, max_v=10_000),
        max_retained_events=_env_int(
            "LEDGER_VM_MAX_RETAINED_EVENTS", 4096, min_v=1, max_v=1_000_000
        ),
        db_path=Path(os.getenv("LEDGER_VM_DB") or "ledger.db").expanduser(),
        log_level=_env_log_level("LEDGER_VM_LOG_LEVEL", "WARNING"),
    )


__all__ = ["VMConfig", "load_config"]
