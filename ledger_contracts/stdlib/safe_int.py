# -*- coding: utf-8 -*-
"""
ledger_contracts.stdlib.safe_int
================================

Checked integer helpers for ledger contracts.

Goals
-----
- Integer-only arithmetic, never floats.
- Fixed numeric domains mirroring the persisted widths:
    * I128: signed 128-bit (vault assets and shares)
    * U128: unsigned 128-bit (token amounts)
    * U32:  seat numbers
- Results that leave the domain raise `Overflow` instead of wrapping.
  Intermediate products are exact (Python ints), only results are checked.

Conventions
-----------
- `require_*` validate caller input and raise `InvalidAmount`.
- `i128_*` / `u128_*` do checked arithmetic and raise `Overflow`.
- `mul_div_down(a, b, d)` is floor((a*b)/d) for non-negative operands,
  which equals truncation toward zero.
"""

from __future__ import annotations

from typing import Final

from ..errors import InvalidAmount, Overflow

I128_MIN: Final[int] = -(1 << 127)
I128_MAX: Final[int] = (1 << 127) - 1
U128_MAX: Final[int] = (1 << 128) - 1
U32_MAX: Final[int] = (1 << 32) - 1


def _is_int(x: object) -> bool:
    # bool is an int subclass but never a valid amount.
    return isinstance(x, int) and not isinstance(x, bool)


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

def require_positive_i128(n: object, *, what: str = "amount") -> int:
    """`n` must be an int with 0 < n <= I128_MAX."""
    if not _is_int(n) or n <= 0 or n > I128_MAX:  # type: ignore[operator]
        raise InvalidAmount(f"{what} must be > 0 and fit i128", context={what: repr(n)})
    return int(n)  # type: ignore[arg-type]


def require_u128(n: object, *, what: str = "amount") -> int:
    """`n` must be an int with 0 <= n <= U128_MAX."""
    if not _is_int(n) or n < 0 or n > U128_MAX:  # type: ignore[operator]
        raise InvalidAmount(f"{what} must fit u128", context={what: repr(n)})
    return int(n)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Checked arithmetic
# ---------------------------------------------------------------------------

def _check_i128(x: int, op: str) -> int:
    if x < I128_MIN or x > I128_MAX:
        raise Overflow(f"i128 {op} out of range", context={"op": op})
    return x


def i128_add(x: int, y: int) -> int:
    return _check_i128(x + y, "add")


def i128_sub(x: int, y: int) -> int:
    return _check_i128(x - y, "sub")


def u128_add(x: int, y: int) -> int:
    z = x + y
    if z > U128_MAX:
        raise Overflow("u128 add out of range", context={"op": "add"})
    return z


def u128_sub(x: int, y: int) -> int:
    z = x - y
    if z < 0:
        raise Overflow("u128 sub underflow", context={"op": "sub"})
    return z


def mul_div_down(a: int, b: int, d: int) -> int:
    """
    floor(a*b/d) for a, b >= 0 and d > 0, checked to fit i128.

    A zero divisor is a programming error at this level; callers guard it
    with the domain-specific failure they need.
    """
    if d <= 0:
        raise ZeroDivisionError("mul_div_down divisor must be positive")
    if a < 0 or b < 0:
        raise ValueError("mul_div_down operands must be non-negative")
    return _check_i128((a * b) // d, "mul_div")


__all__ = [
    "I128_MIN",
    "I128_MAX",
    "U128_MAX",
    "U32_MAX",
    "require_positive_i128",
    "require_u128",
    "i128_add",
    "i128_sub",
    "u128_add",
    "u128_sub",
    "mul_div_down",
]
