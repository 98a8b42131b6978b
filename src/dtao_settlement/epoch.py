"""
Epoch distributors: turn a subnet's drained pending emission into per-hotkey
mining/validator emission.

Consensus itself is outside this package. `EpochDistributor` is the seam;
`StakeWeightedEpoch` is a deterministic reference that pays registered
neurons in proportion to their delegated stake.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from .core.datatypes import HotkeyEmission
from .ledger import Ledger


class EpochDistributor(ABC):
    @abstractmethod
    def epoch(self, netuid: int, emission: int) -> List[HotkeyEmission]:
        """Split `emission` across hotkeys; the rows must sum to at most `emission`."""


class StakeWeightedEpoch(EpochDistributor):
    """Pro-rata by `stake_with_children_and_parents`, half mining / half validator.

    Neurons are taken in registration order. With no stake anywhere every
    neuron gets an equal share. Shares are floored; dust is not emitted.
    """

    def __init__(self, ledger: Ledger):
        self.ledger = ledger

    def epoch(self, netuid: int, emission: int) -> List[HotkeyEmission]:
        subnet = self.ledger.state.get_subnet(netuid)
        if subnet is None or not subnet.neurons:
            return []
        neurons = list(subnet.neurons)
        stakes = [self.ledger.stake_with_children_and_parents(h, netuid) for h in neurons]
        total = sum(stakes)

        out: List[HotkeyEmission] = []
        for hotkey, stake in zip(neurons, stakes):
            if total == 0:
                share = emission // len(neurons)
            else:
                share = emission * stake // total
            mining = share // 2
            out.append(HotkeyEmission(hotkey, mining, share - mining))
        return out


__all__ = ["EpochDistributor", "StakeWeightedEpoch"]
