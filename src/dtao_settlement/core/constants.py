"""
Settlement Core Constants (integer domain)
==========================================

Only integer bounds and chain defaults live here. Decimal quanta are kept for
display/IO helpers in `fmt.py` and `amounts.py`; they never enter a state
transition.
"""

from decimal import Decimal

# ---------------------------------------------------------------------------
# Integer widths
# ---------------------------------------------------------------------------

U16_MAX: int = (1 << 16) - 1
U64_MAX: int = (1 << 64) - 1

#: Integer bridge: base units (rao) per 1 TAO.
RAO_PER_TAO: int = 1_000_000_000


# ---------------------------------------------------------------------------
# Network layout
# ---------------------------------------------------------------------------

#: The root network never hosts delegation edges or AMM reserves.
ROOT_NETUID: int = 0

#: A hotkey may declare at most this many children per subnet.
MAX_CHILDREN: int = 5


# ---------------------------------------------------------------------------
# Chain defaults (overridable through EngineConfig)
# ---------------------------------------------------------------------------

DEFAULT_HOTKEY_EMISSION_TEMPO: int = 7200
DEFAULT_TEMPO: int = 360
DEFAULT_BLOCK_EMISSION: int = 1 * RAO_PER_TAO
DEFAULT_TOTAL_SUPPLY: int = 21_000_000 * RAO_PER_TAO
DEFAULT_NETWORK_MIN_LOCK: int = 100 * RAO_PER_TAO
DEFAULT_LOCK_REDUCTION_INTERVAL: int = 14 * 7200
DEFAULT_TAKE: int = 11_796  # ~18% of u16::MAX
DEFAULT_SET_CHILDREN_RATE_LIMIT: int = 150
DEFAULT_SUBNET_OWNER_LOCK_PERIOD: int = 90 * 7200

#: Sum-of-prices threshold separating TAO injection (below) from Alpha injection.
DEFAULT_PRICE_THRESHOLD: Decimal = Decimal("1.0")


# ---------------------------------------------------------------------------
# Decimal quanta for display/IO quantisation (formatting helpers)
# ---------------------------------------------------------------------------

# Minimum quantisation step for TAO values (1 rao = 1e-9 TAO).
RAO_QUANTUM: Decimal = Decimal("1e-9")


__all__ = [
    "U16_MAX",
    "U64_MAX",
    "RAO_PER_TAO",
    "ROOT_NETUID",
    "MAX_CHILDREN",
    "DEFAULT_HOTKEY_EMISSION_TEMPO",
    "DEFAULT_TEMPO",
    "DEFAULT_BLOCK_EMISSION",
    "DEFAULT_TOTAL_SUPPLY",
    "DEFAULT_NETWORK_MIN_LOCK",
    "DEFAULT_LOCK_REDUCTION_INTERVAL",
    "DEFAULT_TAKE",
    "DEFAULT_SET_CHILDREN_RATE_LIMIT",
    "DEFAULT_SUBNET_OWNER_LOCK_PERIOD",
    "DEFAULT_PRICE_THRESHOLD",
    "RAO_QUANTUM",
]
