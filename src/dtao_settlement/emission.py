"""
Hotkey emission: accumulation through the delegation graph and the periodic
drain to nominators.

accumulate_hotkey_emission
    Epoch output lands on a hotkey. The hotkey keeps its take; the rest is
    split with its parents in proportion to the stake each parent delegates
    in. One hop only; rounding dust stays with the hotkey.

drain_hotkey_emission
    Pending emission is paid out as stake. The hotkey keeps its take; the
    rest goes to nominators pro rata, except nominators who increased their
    stake since the previous drain. Whatever is not paid out (skipped
    nominators, rounding) is staked to the hotkey's owner. The credited total
    always equals the drained emission.
"""

from __future__ import annotations

import logging

from .core.amounts import saturating_add, saturating_sub
from .core.constants import U16_MAX, U64_MAX
from .core.fixed import I64F64, I96F32
from .ledger import Ledger

logger = logging.getLogger(__name__)


def hotkey_take_of(take: int, emission: int) -> int:
    """floor(emission * take / u16::MAX) in I64F64."""
    proportion = I64F64.from_num(take).saturating_div(I64F64.from_num(U16_MAX))
    return proportion.saturating_mul(I64F64.from_num(emission)).to_u64()


def nominator_share(emission: int, stake: int, total_stake: int) -> int:
    """floor(emission * stake / total_stake); zero when nothing is staked.

    The product is formed before the division, as I64F64 does when it does
    not saturate, but on unbounded ints so large pending amounts times large
    stakes stay exact.
    """
    if total_stake == 0:
        return 0
    return emission * stake // total_stake


def accumulate_hotkey_emission(ledger: Ledger, hotkey: str, netuid: int, emission: int) -> None:
    state = ledger.state
    rec = state.ensure_hotkey(hotkey)

    # --- 1. hotkey take
    hotkey_take = hotkey_take_of(rec.take, emission)
    emission_minus_take = saturating_sub(emission, hotkey_take)
    remaining = emission_minus_take

    # --- 2. parents' shares
    total_hotkey_stake = ledger.stake_with_children_and_parents(hotkey, netuid)
    if total_hotkey_stake != 0:
        total_fx = I96F32.from_num(total_hotkey_stake)
        emission_fx = I96F32.from_num(emission_minus_take)
        u64_max_fx = I96F32.from_num(U64_MAX)
        for proportion, parent in state.get_parents(hotkey, netuid):
            parent_stake = ledger.total_stake_for_hotkey(parent)
            stake_from_parent = I96F32.from_num(parent_stake).saturating_mul(
                I96F32.from_num(proportion).saturating_div(u64_max_fx)
            )
            share = stake_from_parent.saturating_div(total_fx)
            parent_take = min(share.saturating_mul(emission_fx).to_u64(), remaining)

            parent_rec = state.ensure_hotkey(parent)
            parent_rec.pending_emission = saturating_add(parent_rec.pending_emission, parent_take)
            remaining -= parent_take
            logger.debug("accumulate %s -> parent %s: %d", hotkey, parent, parent_take)

    # --- 3. hotkey keeps remainder plus take
    rec.pending_emission = saturating_add(rec.pending_emission, remaining + hotkey_take)
    logger.debug(
        "accumulate netuid=%d hotkey=%s emission=%d take=%d kept=%d",
        netuid, hotkey, emission, hotkey_take, remaining,
    )


def drain_hotkey_emission(ledger: Ledger, hotkey: str, emission: int, block: int) -> None:
    state = ledger.state
    rec = state.ensure_hotkey(hotkey)

    # --- 1. clear pending and move the drain marker
    rec.pending_emission = 0
    last_drain = rec.last_drain_block
    rec.last_drain_block = block

    # --- 2. hotkey take
    total_hotkey_stake = ledger.total_stake_for_hotkey(hotkey)
    hotkey_take = hotkey_take_of(rec.take, emission)
    emission_minus_take = saturating_sub(emission, hotkey_take)
    remainder = emission_minus_take

    # --- 3. nominators, stake insertion order
    for coldkey, nom in state.nominators(hotkey):
        if nom.last_increase_block > last_drain:
            logger.debug("drain %s: skip %s (stake increased at %d)", hotkey, coldkey, nom.last_increase_block)
            continue
        share = min(nominator_share(emission_minus_take, nom.amount, total_hotkey_stake), remainder)
        ledger.increase_stake(coldkey, hotkey, share)
        remainder -= share

    # --- 4. take and leftovers to the hotkey
    ledger.increase_stake_on_hotkey(hotkey, hotkey_take + remainder)
    logger.debug(
        "drain block=%d hotkey=%s emission=%d take=%d leftover=%d",
        block, hotkey, emission, hotkey_take, remainder,
    )


__all__ = [
    "hotkey_take_of",
    "nominator_share",
    "accumulate_hotkey_emission",
    "drain_hotkey_emission",
]
