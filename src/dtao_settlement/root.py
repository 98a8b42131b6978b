"""
Root emission allocator.

Each block the root step decides how much new value each subnet receives:

- Block emission halves every time issuance covers another half of the
  remaining supply: emission = default >> h, where h is the largest integer
  with 2**h * (S - issuance) <= S. It is zero once issuance reaches S.
- Dynamic subnets are fed through their pools. When the sum of pool prices
  is below the configured threshold, TAO is injected into each pool in
  proportion to its TAO reserve (alpha gets cheaper relative to TAO, prices
  rise). Otherwise each pool receives `block_emission` alpha.
- Static subnets keep whatever emission value was set for them explicitly.

The injected amount becomes the subnet's `emission_value` for this block.

`recalculate_tempos` sets dynamic subnet tempos inversely proportional to
their pool prices.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

from .core.amounts import ensure_u64
from .core.constants import ROOT_NETUID
from .core.exc import EmissionValuesError, RootEpochError
from .core.fixed import I64F64, I96F32
from .ledger import Ledger
from .scheduling import calculate_tempos

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Block emission
# ---------------------------------------------------------------------------

def get_block_emission_for_issuance(issuance: int, *, default_block_emission: int, total_supply: int) -> int:
    if issuance >= total_supply:
        return 0
    remaining = total_supply - issuance
    h = 0
    while (remaining << (h + 1)) <= total_supply:
        h += 1
    return default_block_emission >> h


def get_block_emission(ledger: Ledger) -> int:
    cfg = ledger.state.config
    return get_block_emission_for_issuance(
        ledger.total_issuance,
        default_block_emission=cfg.default_block_emission,
        total_supply=cfg.total_supply,
    )


# ---------------------------------------------------------------------------
# Allocators
# ---------------------------------------------------------------------------

class RootAllocator(ABC):
    """Computes per-subnet emission values for one block."""

    @abstractmethod
    def root_epoch(self, ledger: Ledger, block: int) -> None:
        """Update `emission_value` on subnets; raise RootEpochError if it cannot."""


class DynamicRootAllocator(RootAllocator):
    def root_epoch(self, ledger: Ledger, block: int) -> None:
        state = ledger.state
        subnets = [s for s in state.subnets() if s.netuid != ROOT_NETUID]
        if not subnets:
            raise RootEpochError(f"no subnets to emit to at block {block}")

        block_emission = get_block_emission(ledger)
        dynamic = [s for s in subnets if s.is_dynamic]
        if not dynamic:
            return

        price_sum = I64F64.zero()
        for s in dynamic:
            price_sum = price_sum.saturating_add(s.pool.price())

        if price_sum < state.config.price_threshold:
            # --- TAO injection, proportional to each pool's TAO reserve
            total_tao = sum(s.pool.tao_reserve for s in dynamic)
            emission_fx = I96F32.from_num(block_emission)
            total_fx = I96F32.from_num(total_tao)
            for s in dynamic:
                share = I96F32.from_num(s.pool.tao_reserve).saturating_div(total_fx)
                amount = share.saturating_mul(emission_fx).to_u64()
                s.pool.inject_tao(amount)
                ledger.increase_total_subnet_tao(s.netuid, amount)
                s.emission_value = amount
                s.denomination = "TAO"
            logger.debug("root_epoch block=%d TAO injection price_sum=%s", block, price_sum)
        else:
            # --- alpha injection, full block emission per pool
            for s in dynamic:
                s.pool.inject_alpha(block_emission)
                s.emission_value = block_emission
                s.denomination = "ALPHA"
            logger.debug("root_epoch block=%d ALPHA injection price_sum=%s", block, price_sum)


# ---------------------------------------------------------------------------
# Price-driven tempos (dynamic subnets)
# ---------------------------------------------------------------------------

def recalculate_tempos(ledger: Ledger, k: I64F64) -> List[Tuple[int, int]]:
    """Set each dynamic subnet's tempo from its pool price; returns (netuid, tempo).

    Cheaper subnets get longer tempos. A zero price gives tempo 0, which
    stops that subnet's epochs until the next recalculation.
    """
    dynamic = [s for s in ledger.state.subnets() if s.is_dynamic]
    tempos = calculate_tempos([s.netuid for s in dynamic], k, [s.pool.price() for s in dynamic])
    for s, (_, tempo) in zip(dynamic, tempos):
        s.tempo = tempo
    logger.info("tempos recalculated: %s", dict(tempos))
    return tempos


# ---------------------------------------------------------------------------
# Explicit emission values (static subnets)
# ---------------------------------------------------------------------------

def set_emission_values(ledger: Ledger, netuids: Sequence[int], values: Sequence[int]) -> None:
    state = ledger.state
    if len(netuids) != len(values):
        raise EmissionValuesError(
            f"netuids and values must have equal length ({len(netuids)} != {len(values)})"
        )
    for netuid in netuids:
        if not state.subnet_exists(netuid):
            raise EmissionValuesError(f"netuid {netuid} does not exist")
    for v in values:
        ensure_u64(v, "emission value")
    block_emission = get_block_emission(ledger)
    if sum(values) > block_emission:
        raise EmissionValuesError(f"emission values sum {sum(values)} exceeds block emission {block_emission}")

    for netuid, v in zip(netuids, values):
        s = state.subnet(netuid)
        s.emission_value = v
        s.denomination = "TAO"
    logger.info("emission values set: %s", dict(zip(netuids, values)))


__all__ = [
    "get_block_emission_for_issuance",
    "get_block_emission",
    "RootAllocator",
    "DynamicRootAllocator",
    "recalculate_tempos",
    "set_emission_values",
]
