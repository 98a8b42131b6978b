"""
Per-block coinbase transition.

Order of operations for one block:

1. root allocator sets this block's emission value per subnet
   (a RootEpochError is logged and the step skipped);
2. every subnet accumulates its emission value as pending emission;
3. subnets whose epoch falls on this block drain their pending emission
   through the epoch distributor onto hotkeys (and their parents);
4. hotkeys whose drain slot falls on this block pay their pending emission
   out to nominators, and total issuance grows by the drained amount;
5. dynamic subnets must have `total_subnet_tao == tao_reserve`.

Subnets are visited in ascending netuid and hotkeys in index order, so the
transition is a pure function of state and block number.
"""

from __future__ import annotations

import logging

from .core.amounts import saturating_add
from .core.datatypes import BlockReport
from .core.exc import InvariantViolation, RootEpochError
from .emission import accumulate_hotkey_emission, drain_hotkey_emission
from .epoch import EpochDistributor
from .ledger import Ledger
from .root import RootAllocator
from .scheduling import should_drain_hotkey, should_run_epoch

logger = logging.getLogger(__name__)


def check_reserve_sync(ledger: Ledger) -> None:
    for s in ledger.state.subnets():
        if s.is_dynamic and s.total_subnet_tao != s.pool.tao_reserve:
            raise InvariantViolation(
                f"netuid {s.netuid}: total_subnet_tao {s.total_subnet_tao} != tao_reserve {s.pool.tao_reserve}"
            )


def run_coinbase(
    ledger: Ledger,
    epoch: EpochDistributor,
    allocator: RootAllocator,
    block: int,
) -> BlockReport:
    state = ledger.state
    state.block = block
    report = BlockReport(block=block)

    # --- 1. root allocator
    try:
        allocator.root_epoch(ledger, block)
    except RootEpochError as e:
        report.root_ok = False
        logger.warning("root epoch skipped at block %d: %s", block, e)

    # --- 2. emission value -> subnet pending
    subnets = state.subnets()
    for s in subnets:
        s.pending_emission = saturating_add(s.pending_emission, s.emission_value)
        report.emission_values[s.netuid] = s.emission_value

    # --- 3. epochs
    for s in subnets:
        if not should_run_epoch(s.netuid, s.tempo, block):
            continue
        subnet_emission = s.pending_emission
        s.pending_emission = 0
        rows = epoch.epoch(s.netuid, subnet_emission)
        for row in rows:
            accumulate_hotkey_emission(ledger, row.hotkey, s.netuid, row.total)
        report.epochs_run.append(s.netuid)
        logger.debug("epoch netuid=%d block=%d emission=%d rows=%d", s.netuid, block, subnet_emission, len(rows))

    # --- 4. hotkey drains
    period = state.config.hotkey_emission_tempo
    for rec in state.hotkeys_by_index():
        emission = rec.pending_emission
        if emission == 0:
            continue
        if not should_drain_hotkey(rec.index, block, period):
            continue
        drain_hotkey_emission(ledger, rec.hotkey, emission, block)
        ledger.increase_total_issuance(emission)
        report.drained.append((rec.hotkey, emission))
        report.issuance_delta += emission

    # --- 5. reserve sync
    check_reserve_sync(ledger)
    return report


__all__ = ["check_reserve_sync", "run_coinbase"]
