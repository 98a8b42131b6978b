"""
Formatting helpers (non-core arithmetic).

Core arithmetic uses integers and binary fixed point. Decimal here is only
for formatting and convenience (e.g., tests, logs, trace exports).
"""

from decimal import Decimal, getcontext, ROUND_DOWN

from .constants import RAO_QUANTUM
from .amounts import tao_from_rao
from .exc import AmountDomainError
from .fixed import FixedPoint

# Debug printing control (formatting layer)
DEBUG_FMT = False

def _dbg(msg: str) -> None:
    if DEBUG_FMT:
        print(msg)


# ---------------------------------------------------------------------------
# Global Decimal precision (formatting only)
# ---------------------------------------------------------------------------

#: Default global precision for Decimal-based formatting. Fixed-point
#: bridges use their own local context and are unaffected.
DEFAULT_DECIMAL_PRECISION: int = 40
getcontext().prec = DEFAULT_DECIMAL_PRECISION


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def fmt_fixed(x: FixedPoint, places: int = 9) -> str:
    """Fixed point as a plain decimal string truncated to `places` digits."""
    quantum = Decimal(1).scaleb(-places)
    return format(x.to_decimal().quantize(quantum, rounding=ROUND_DOWN), "f")


def fmt_tao(rao: int) -> str:
    """Integer rao as a TAO string with 9 decimals, e.g. 1500000000 -> '1.500000000'."""
    if rao < 0:
        raise AmountDomainError("fmt_tao: negative rao")
    s = format(tao_from_rao(rao).quantize(RAO_QUANTUM), "f")
    _dbg(f"[fmt_tao] rao={rao} -> {s}")
    return s


__all__ = [
    "DEFAULT_DECIMAL_PRECISION",
    "fmt_fixed",
    "fmt_tao",
]
