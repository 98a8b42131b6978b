"""
Epoch and drain scheduling predicates (pure functions).

A subnet runs its epoch when `(block + netuid + 1) % (tempo + 1) == 0`:

    tempo | netuid | first epoch block
      1       0          0
      1       1          1
      2       0          1
      2       1          0
     100      0         99
     100      1         98

Tempo 0 means the subnet never runs an epoch. Offsetting by netuid spreads
epochs of subnets sharing a tempo across different blocks.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .core.constants import DEFAULT_HOTKEY_EMISSION_TEMPO, U16_MAX, U64_MAX
from .core.fixed import I64F64


def blocks_until_next_epoch(netuid: int, tempo: int, block: int) -> int:
    """Blocks remaining before `netuid` runs its epoch (0 means this block)."""
    if tempo == 0:
        return U64_MAX
    return tempo - ((block + netuid + 1) % (tempo + 1))


def should_run_epoch(netuid: int, tempo: int, block: int) -> bool:
    return blocks_until_next_epoch(netuid, tempo, block) == 0


def should_drain_hotkey(index: int, block: int, period: int = DEFAULT_HOTKEY_EMISSION_TEMPO) -> bool:
    """True once per `period` blocks for each hotkey index."""
    return block % period == index % period


def calculate_tempos(
    netuids: Sequence[int],
    k: I64F64,
    prices: Sequence[I64F64],
) -> List[Tuple[int, int]]:
    """Tempo per subnet inversely proportional to its price.

    tempo_i = floor(k * sum(|p|) / |p_i|), saturated into u16. A zero price
    yields tempo 0. Negative prices are taken by magnitude.
    """
    if len(netuids) != len(prices):
        raise ValueError(
            f"netuids and prices must have equal length ({len(netuids)} != {len(prices)})"
        )
    total = I64F64.zero()
    for p in prices:
        total = total.saturating_add(p.abs())
    scaled = k.saturating_mul(total)

    out: List[Tuple[int, int]] = []
    for netuid, p in zip(netuids, prices):
        if p.is_zero():
            out.append((netuid, 0))
            continue
        tempo = scaled.saturating_div(p.abs()).to_num()
        out.append((netuid, max(0, min(tempo, U16_MAX))))
    return out


__all__ = [
    "blocks_until_next_epoch",
    "should_run_epoch",
    "should_drain_hotkey",
    "calculate_tempos",
]
