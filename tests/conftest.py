from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from dtao_settlement import EngineConfig, SettlementEngine
from dtao_settlement.core import HotkeyEmission
from dtao_settlement.epoch import EpochDistributor
from dtao_settlement.ledger import Ledger
from dtao_settlement.state import State


# -----------------------------
# Test helpers
# -----------------------------


class FixedEpoch(EpochDistributor):
    """Epoch stub paying a fixed split per netuid.

    `splits[netuid]` is a list of (hotkey, weight). The emission is divided
    by integer weight; the last row takes the rounding remainder so that the
    rows always sum to the emission.
    """

    def __init__(self, splits: Optional[Dict[int, List[tuple]]] = None) -> None:
        self.splits = splits or {}
        self.calls: List[tuple] = []

    def epoch(self, netuid: int, emission: int) -> List[HotkeyEmission]:
        self.calls.append((netuid, emission))
        rows = self.splits.get(netuid, [])
        if not rows:
            return []
        total_w = sum(w for _, w in rows)
        out = []
        paid = 0
        for i, (hk, w) in enumerate(rows):
            amt = emission - paid if i == len(rows) - 1 else emission * w // total_w
            paid += amt
            out.append(HotkeyEmission(hk, amt, 0))
        return out


# -----------------------------
# Pytest fixtures
# -----------------------------

@pytest.fixture()
def state() -> State:
    return State(EngineConfig())


@pytest.fixture()
def ledger(state) -> Ledger:
    return Ledger(state)


@pytest.fixture()
def engine() -> SettlementEngine:
    return SettlementEngine(EngineConfig())


@pytest.fixture()
def fixed_epoch():
    """Factory for FixedEpoch stubs."""
    return FixedEpoch


@pytest.fixture()
def owned_subnet(engine) -> SettlementEngine:
    """Engine with static netuid 1 (tempo 1) and hotkeys parent/child owned by 'cold'."""
    engine.add_network(1, tempo=1, owner="cold")
    engine.register_neuron(1, "parent", "cold")
    engine.register_neuron(1, "child", "cold")
    return engine
