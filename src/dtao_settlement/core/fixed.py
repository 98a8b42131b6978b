"""
Binary fixed-point numbers with saturating arithmetic.

Every quantity that is a fraction (takes, proportions, prices, shares) is
carried in one of these types so that the block transition replays
bit-identically: no float ever enters a state transition.

- I64F64: signed, 64 integer bits, 64 fractional bits.
- U64F64: unsigned, 64 integer bits, 64 fractional bits.
- I96F32: signed, 96 integer bits, 32 fractional bits.

The raw representation is a Python int (`bits`) scaled by 2**FRAC_BITS.
Operations never raise on overflow: results clamp to the type's range.
Division by zero saturates (max for a positive numerator, min for a negative
one, zero for zero). Multiplication floors the scaled product; division
truncates toward zero; `to_num` floors.

Decimal appears only in `from_decimal` / `to_decimal` for I/O and logs.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR, localcontext
from typing import ClassVar, Tuple, TypeVar

from .constants import U64_MAX
from .exc import AmountDomainError

F = TypeVar("F", bound="FixedPoint")

# Enough digits to hold 2**128 exactly when bridging to Decimal.
_DECIMAL_PREC = 80


def _div_trunc(a: int, b: int) -> int:
    """Integer division rounding toward zero (b != 0)."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


@dataclass(frozen=True, repr=False)
class FixedPoint:
    """Base class; use one of the concrete widths below."""

    bits: int

    FRAC_BITS: ClassVar[int] = 0
    INT_BITS: ClassVar[int] = 0
    SIGNED: ClassVar[bool] = True

    def __post_init__(self):
        if isinstance(self.bits, bool) or not isinstance(self.bits, int):
            raise AmountDomainError(f"{type(self).__name__} bits must be int")
        lo, hi = self._bounds()
        if self.bits < lo or self.bits > hi:
            raise AmountDomainError(
                f"{type(self).__name__} bits out of range: {self.bits}"
            )

    # ------------- range -------------

    @classmethod
    def _bounds(cls) -> Tuple[int, int]:
        total = cls.INT_BITS + cls.FRAC_BITS
        if cls.SIGNED:
            return -(1 << (total - 1)), (1 << (total - 1)) - 1
        return 0, (1 << total) - 1

    @classmethod
    def _clamp(cls, raw: int) -> int:
        lo, hi = cls._bounds()
        if raw < lo:
            return lo
        if raw > hi:
            return hi
        return raw

    # ------------- constructors -------------

    @classmethod
    def from_bits(cls: type[F], raw: int) -> F:
        return cls(cls._clamp(raw))

    @classmethod
    def from_num(cls: type[F], n: int) -> F:
        """Integer to fixed point, saturating."""
        if isinstance(n, bool) or not isinstance(n, int):
            raise AmountDomainError(f"from_num expects int, got {type(n).__name__}")
        return cls.from_bits(n << cls.FRAC_BITS)

    @classmethod
    def from_ratio(cls: type[F], num: int, den: int) -> F:
        """num / den at full fractional precision (truncated toward zero)."""
        return cls.from_num(num).saturating_div(cls.from_num(den))

    @classmethod
    def from_decimal(cls: type[F], x: Decimal) -> F:
        """Bridge from Decimal (floored onto the binary grid). I/O boundary only."""
        if x.is_nan() or x.is_infinite():
            raise AmountDomainError("invalid Decimal for fixed point")
        with localcontext() as ctx:
            ctx.prec = _DECIMAL_PREC
            scaled = (x * (Decimal(2) ** cls.FRAC_BITS)).to_integral_value(rounding=ROUND_FLOOR)
        return cls.from_bits(int(scaled))

    @classmethod
    def zero(cls: type[F]) -> F:
        return cls(0)

    @classmethod
    def one(cls: type[F]) -> F:
        return cls.from_num(1)

    @classmethod
    def max_value(cls: type[F]) -> F:
        return cls(cls._bounds()[1])

    @classmethod
    def min_value(cls: type[F]) -> F:
        return cls(cls._bounds()[0])

    # ------------- conversions -------------

    def to_num(self) -> int:
        """Floor to an integer."""
        return self.bits >> self.FRAC_BITS

    def to_u64(self) -> int:
        """Floor to an integer clamped into [0, u64::MAX]."""
        n = self.to_num()
        if n < 0:
            return 0
        return n if n <= U64_MAX else U64_MAX

    def to_decimal(self) -> Decimal:
        """Exact Decimal value, for logs/printing only."""
        with localcontext() as ctx:
            ctx.prec = _DECIMAL_PREC
            return Decimal(self.bits) / (Decimal(2) ** self.FRAC_BITS)

    # ------------- predicates -------------

    def is_zero(self) -> bool:
        return self.bits == 0

    def is_negative(self) -> bool:
        return self.bits < 0

    # ------------- arithmetic (saturating) -------------

    def _check(self, other: "FixedPoint") -> None:
        if type(other) is not type(self):
            raise AmountDomainError(
                f"{type(self).__name__} arithmetic requires {type(self).__name__} operands"
            )

    def saturating_add(self: F, other: F) -> F:
        self._check(other)
        return self.from_bits(self.bits + other.bits)

    def saturating_sub(self: F, other: F) -> F:
        self._check(other)
        return self.from_bits(self.bits - other.bits)

    def saturating_mul(self: F, other: F) -> F:
        self._check(other)
        return self.from_bits((self.bits * other.bits) >> self.FRAC_BITS)

    def saturating_div(self: F, other: F) -> F:
        self._check(other)
        if other.bits == 0:
            if self.bits > 0:
                return self.max_value()
            if self.bits < 0:
                return self.min_value()
            return self.zero()
        return self.from_bits(_div_trunc(self.bits << self.FRAC_BITS, other.bits))

    def abs(self: F) -> F:
        return self.from_bits(abs(self.bits))

    __add__ = saturating_add
    __sub__ = saturating_sub
    __mul__ = saturating_mul
    __truediv__ = saturating_div

    # ------------- comparisons -------------

    def __lt__(self, other: "FixedPoint") -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.bits < other.bits

    def __le__(self, other: "FixedPoint") -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.bits <= other.bits

    def __gt__(self, other: "FixedPoint") -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.bits > other.bits

    def __ge__(self, other: "FixedPoint") -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.bits >= other.bits

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_decimal().normalize()})"


class I64F64(FixedPoint):
    """Signed 64.64 fixed point (takes, nominator shares, prices)."""

    FRAC_BITS: ClassVar[int] = 64
    INT_BITS: ClassVar[int] = 64
    SIGNED: ClassVar[bool] = True


class U64F64(FixedPoint):
    """Unsigned 64.64 fixed point."""

    FRAC_BITS: ClassVar[int] = 64
    INT_BITS: ClassVar[int] = 64
    SIGNED: ClassVar[bool] = False


class I96F32(FixedPoint):
    """Signed 96.32 fixed point (parent shares; wide integer part for stake products)."""

    FRAC_BITS: ClassVar[int] = 32
    INT_BITS: ClassVar[int] = 96
    SIGNED: ClassVar[bool] = True


__all__ = [
    "FixedPoint",
    "I64F64",
    "U64F64",
    "I96F32",
]
