"""
ledger_contracts: contracts run by the ledger_vm host.

- vault  : proportional-share vault (Vault)
- token  : fungible token ledger with allowances (Token)
- seats  : one-seat-per-holder NFT registry (SeatRegistry)
- errors : named revert kinds shared by all three
"""

from __future__ import annotations

from . import errors
from .seats import SeatRegistry
from .token import Token
from .vault import Vault, VaultState

__all__ = ["errors", "Vault", "VaultState", "Token", "SeatRegistry"]
