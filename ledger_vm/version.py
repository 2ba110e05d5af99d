"""
ledger_vm.version: the version reported by `ledger-vm --version`.

LEDGER_VM_VERSION overrides everything. Otherwise the installed
`ledger-contracts` distribution metadata is used; a source tree that was
never installed reports FALLBACK_VERSION.
"""

from __future__ import annotations

import os
from importlib import metadata

DIST_NAME = "ledger-contracts"
FALLBACK_VERSION = "0.1.0+unknown"


def resolve_version(dist_name: str = DIST_NAME) -> str:
    override = (os.getenv("LEDGER_VM_VERSION") or "").strip()
    if override:
        return override
    try:
        return metadata.version(dist_name)
    except metadata.PackageNotFoundError:
        return FALLBACK_VERSION


__version__ = resolve_version()

__all__ = ["__version__", "resolve_version", "DIST_NAME", "FALLBACK_VERSION"]
