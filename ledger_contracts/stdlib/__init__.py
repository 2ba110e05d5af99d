# -*- coding: utf-8 -*-
"""
ledger_contracts.stdlib
=======================

Small shared helpers for the contracts in this package. Nothing here touches
storage or emits events; contracts do that explicitly through their
CallContext.

- safe_int : checked i128/u128 arithmetic and amount validation
- require_address : principal sanity check
"""

from __future__ import annotations

from typing import Final

from ..errors import InvalidAddress

# Non-empty sentinel used as the counterparty of mint/burn style events.
ZERO_ADDR: Final[bytes] = b"\x00"


def require_address(addr: object, *, what: str = "address") -> bytes:
    """
    Ensure `addr` is non-empty bytes. No fixed width is imposed; hosts may
    use 32-byte account ids or short test labels alike.
    """
    if not isinstance(addr, (bytes, bytearray)) or len(addr) == 0:
        raise InvalidAddress(context={"what": what})
    return bytes(addr)


__all__ = ["ZERO_ADDR", "require_address"]
