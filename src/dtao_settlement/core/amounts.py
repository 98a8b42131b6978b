"""
Amount primitives: saturating u64 arithmetic over integer rao / alpha units.

- Balances, stakes, reserves and emissions are plain non-negative ints.
- Every additive combination used by the block transition saturates at the
  u64 bounds instead of raising; subtraction clamps at zero.
- Domain checks (`ensure_u64`) are applied at caller-facing boundaries only.
- Decimal is used solely by the TAO/rao bridges for I/O and display.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_UP
from typing import Optional

from .constants import U64_MAX, RAO_QUANTUM
from .exc import AmountDomainError


# ----------------------------
# Saturating u64 arithmetic
# ----------------------------

def saturating_add(a: int, b: int, *, bound: int = U64_MAX) -> int:
    """a + b clamped to [0, bound]."""
    s = a + b
    if s > bound:
        return bound
    return s if s > 0 else 0


def saturating_sub(a: int, b: int) -> int:
    """a - b clamped at zero."""
    return a - b if a > b else 0


def saturating_mul(a: int, b: int, *, bound: int = U64_MAX) -> int:
    """a * b clamped to [0, bound]."""
    p = a * b
    if p > bound:
        return bound
    return p if p > 0 else 0


def checked_add(a: int, b: int, *, bound: int = U64_MAX) -> Optional[int]:
    """a + b, or None when the sum leaves [0, bound]."""
    s = a + b
    if s > bound or s < 0:
        return None
    return s


def ensure_u64(value: int, name: str = "amount") -> int:
    """Return value if it is an int in [0, u64::MAX], else raise AmountDomainError."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise AmountDomainError(f"{name} must be int, got {type(value).__name__}")
    if value < 0:
        raise AmountDomainError(f"{name} must be >= 0, got {value}")
    if value > U64_MAX:
        raise AmountDomainError(f"{name} exceeds u64::MAX: {value}")
    return value


# ----------------------------
# TAO Decimal bridges (I/O only)
# ----------------------------

def tao_from_rao(r: int) -> Decimal:
    """Return Decimal TAO from integer rao (I/O/display only)."""
    if not isinstance(r, int):
        raise AmountDomainError("tao_from_rao: rao must be int")
    if r < 0:
        raise AmountDomainError("tao_from_rao: rao must be >= 0")
    return Decimal(r) * RAO_QUANTUM


def rao_from_tao_in(x: Decimal) -> int:
    """IN-path: ceil TAO Decimal to whole rao (won't charge less)."""
    if x.is_nan() or x.is_infinite():
        raise AmountDomainError("rao_from_tao_in: invalid Decimal")
    if x < 0:
        raise AmountDomainError("rao_from_tao_in: negative not allowed")
    q = (x / RAO_QUANTUM).to_integral_value(rounding=ROUND_UP)
    return int(q)


__all__ = [
    "saturating_add",
    "saturating_sub",
    "saturating_mul",
    "checked_add",
    "ensure_u64",
    "tao_from_rao",
    "rao_from_tao_in",
]
