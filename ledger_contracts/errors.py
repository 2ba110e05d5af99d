"""
ledger_contracts.errors
=======================

Named failure kinds for the vault, token and seat contracts. Every one of them
is a `Revert`: raising it aborts the call and the host rolls back all writes
and events made so far.

Codes are stable strings (log- and CLI-friendly) and double as the lookup key
for `VmError.from_problem()`.
"""

from __future__ import annotations

from ledger_vm.errors import Revert


class ContractError(Revert):
    code = "CONTRACT_ERROR"
    default_message = "contract error"


class AlreadyInitialized(ContractError):
    code = "ALREADY_INITIALIZED"
    default_message = "already initialized"


class NotInitialized(ContractError):
    code = "NOT_INITIALIZED"
    default_message = "not initialized"


class InvalidAmount(ContractError):
    code = "INVALID_AMOUNT"
    default_message = "amount must be a positive integer in range"


class InsufficientBalance(ContractError):
    code = "INSUFFICIENT_BALANCE"
    default_message = "insufficient balance"


class Overflow(ContractError):
    code = "OVERFLOW"
    default_message = "arithmetic overflow"


class AllowanceExceeded(ContractError):
    code = "ALLOWANCE_EXCEEDED"
    default_message = "allowance exceeded"


class AlreadyOwned(ContractError):
    code = "ALREADY_OWNED"
    default_message = "seat already has an owner"


class SenderDoesNotOwn(ContractError):
    code = "SENDER_DOES_NOT_OWN"
    default_message = "sender does not own this seat"


class ReceiverAlreadyHolds(ContractError):
    code = "RECEIVER_ALREADY_HOLDS"
    default_message = "receiver already holds a seat"


class InvalidSeat(ContractError):
    code = "INVALID_SEAT"
    default_message = "seat number must be a u32"


class InvalidAddress(ContractError):
    code = "INVALID_ADDRESS"
    default_message = "address must be non-empty bytes"


class NotFound(ContractError):
    code = "NOT_FOUND"
    default_message = "not found"


__all__ = [
    "ContractError",
    "AlreadyInitialized",
    "NotInitialized",
    "InvalidAmount",
    "InsufficientBalance",
    "Overflow",
    "AllowanceExceeded",
    "AlreadyOwned",
    "SenderDoesNotOwn",
    "ReceiverAlreadyHolds",
    "InvalidSeat",
    "InvalidAddress",
    "NotFound",
]
