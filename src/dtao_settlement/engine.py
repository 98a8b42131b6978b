"""
SettlementEngine: one object owning the state, its ledger view and the two
pluggable collaborators (epoch distributor, root allocator).

Callers drive it block by block with `run_coinbase(block)` and mutate it
through the dispatch-style methods below. Every method delegates to the
module implementing the operation; the engine adds no semantics of its own.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from . import children as _children
from . import lock_cost as _lock_cost
from . import root as _root
from . import staking as _staking
from .coinbase import run_coinbase
from .config import EngineConfig
from .core.constants import U16_MAX
from .core.datatypes import BlockReport
from .core.exc import AmountDomainError
from .core.fixed import I64F64
from .epoch import EpochDistributor, StakeWeightedEpoch
from .ledger import Ledger
from .root import DynamicRootAllocator, RootAllocator
from .state import Edge, State

if TYPE_CHECKING:
    from .trace import BlockTrace

logger = logging.getLogger(__name__)


class SettlementEngine:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        epoch: Optional[EpochDistributor] = None,
        root_allocator: Optional[RootAllocator] = None,
    ):
        self.state = State(config)
        self.ledger = Ledger(self.state)
        self.epoch = epoch if epoch is not None else StakeWeightedEpoch(self.ledger)
        self.root_allocator = root_allocator if root_allocator is not None else DynamicRootAllocator()

    @property
    def config(self) -> EngineConfig:
        return self.state.config

    @property
    def block(self) -> int:
        return self.state.block

    # ------------------------------------------------------------------
    # Block transition
    # ------------------------------------------------------------------

    def run_coinbase(self, block: int) -> BlockReport:
        return run_coinbase(self.ledger, self.epoch, self.root_allocator, block)

    def run_blocks(self, start: int, end: int, trace: Optional["BlockTrace"] = None) -> List[BlockReport]:
        """Run blocks start..end inclusive; optionally record each into `trace`."""
        reports = []
        for block in range(start, end + 1):
            report = self.run_coinbase(block)
            if trace is not None:
                trace.record(self.state, report)
            reports.append(report)
        return reports

    # ------------------------------------------------------------------
    # Delegation graph
    # ------------------------------------------------------------------

    def set_children(self, coldkey: str, hotkey: str, netuid: int,
                     children: Sequence[Tuple[int, str]], block: Optional[int] = None) -> None:
        _children.do_set_children(
            self.state, coldkey, hotkey, netuid, children,
            self.state.block if block is None else block,
        )

    def get_children(self, hotkey: str, netuid: int) -> List[Edge]:
        return _children.get_children(self.state, hotkey, netuid)

    def get_parents(self, child: str, netuid: int) -> List[Edge]:
        return _children.get_parents(self.state, child, netuid)

    # ------------------------------------------------------------------
    # Networks and neurons
    # ------------------------------------------------------------------

    def add_network(self, netuid: int, tempo: int, owner: Optional[str] = None) -> None:
        _lock_cost.add_network(self.state, netuid, tempo, owner=owner, block=self.state.block)

    def user_add_network(self, coldkey: str, hotkey: str, dynamic: bool = True,
                         block: Optional[int] = None) -> int:
        return _lock_cost.user_add_network(
            self.ledger, coldkey, hotkey,
            self.state.block if block is None else block,
            dynamic=dynamic,
        )

    def dissolve_network(self, coldkey: str, netuid: int) -> int:
        return _lock_cost.dissolve_network(self.ledger, coldkey, netuid)

    def register_neuron(self, netuid: int, hotkey: str, coldkey: str) -> None:
        _lock_cost.register_neuron(self.state, netuid, hotkey, coldkey)

    def get_network_lock_cost(self, block: Optional[int] = None) -> int:
        return _lock_cost.get_network_lock_cost(self.state, self.state.block if block is None else block)

    # ------------------------------------------------------------------
    # Staking
    # ------------------------------------------------------------------

    def add_balance(self, coldkey: str, amount: int) -> None:
        self.ledger.add_balance(coldkey, amount)

    def get_balance(self, coldkey: str) -> int:
        return self.ledger.balance(coldkey)

    def add_stake(self, coldkey: str, hotkey: str, amount: int, block: Optional[int] = None) -> None:
        _staking.add_stake(self.ledger, coldkey, hotkey, amount, self.state.block if block is None else block)

    def remove_stake(self, coldkey: str, hotkey: str, amount: int) -> None:
        _staking.remove_stake(self.ledger, coldkey, hotkey, amount)

    def add_subnet_stake(self, coldkey: str, hotkey: str, netuid: int, tao: int,
                         block: Optional[int] = None) -> int:
        return _staking.add_subnet_stake(
            self.ledger, coldkey, hotkey, netuid, tao, self.state.block if block is None else block
        )

    def remove_subnet_stake(self, coldkey: str, hotkey: str, netuid: int, alpha: int,
                            block: Optional[int] = None) -> int:
        return _staking.remove_subnet_stake(
            self.ledger, coldkey, hotkey, netuid, alpha, self.state.block if block is None else block
        )

    def estimate_dynamic_unstake(self, netuid: int, alpha: int) -> int:
        return _staking.estimate_dynamic_unstake(self.state, netuid, alpha)

    def get_tao_per_alpha_price(self, netuid: int) -> I64F64:
        return _staking.get_tao_per_alpha_price(self.state, netuid)

    # ------------------------------------------------------------------
    # Knobs
    # ------------------------------------------------------------------

    def set_emission_values(self, netuids: Sequence[int], values: Sequence[int]) -> None:
        _root.set_emission_values(self.ledger, netuids, values)

    def set_hotkey_emission_tempo(self, tempo: int) -> None:
        if tempo <= 0:
            raise AmountDomainError(f"hotkey emission tempo must be > 0, got {tempo}")
        self.state.config.hotkey_emission_tempo = tempo
        logger.info("hotkey emission tempo set to %d", tempo)

    def recalculate_tempos(self, k: I64F64) -> List[Tuple[int, int]]:
        return _root.recalculate_tempos(self.ledger, k)

    def set_tempo(self, netuid: int, tempo: int) -> None:
        if not 0 <= tempo <= U16_MAX:
            raise AmountDomainError(f"tempo outside u16: {tempo}")
        self.state.subnet(netuid).tempo = tempo

    def set_delegate_take(self, hotkey: str, take: int) -> None:
        if not 0 <= take <= U16_MAX:
            raise AmountDomainError(f"take outside u16: {take}")
        self.state.ensure_hotkey(hotkey).take = take

    def set_subnet_owner_lock_period(self, blocks: int) -> None:
        if blocks < 0:
            raise AmountDomainError("lock period must be >= 0")
        self.state.config.subnet_owner_lock_period = blocks

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_pending_emission(self, netuid: int) -> int:
        return self.state.subnet(netuid).pending_emission

    def get_pending_hotkey_emission(self, hotkey: str) -> int:
        return self.state.pending_emission(hotkey)

    def get_stake(self, coldkey: str, hotkey: str) -> int:
        return self.ledger.stake(coldkey, hotkey)

    def get_total_stake_for_hotkey(self, hotkey: str) -> int:
        return self.ledger.total_stake_for_hotkey(hotkey)

    def get_stake_with_children_and_parents(self, hotkey: str, netuid: int) -> int:
        return self.ledger.stake_with_children_and_parents(hotkey, netuid)

    def get_subnet_stake(self, coldkey: str, hotkey: str, netuid: int) -> int:
        return self.ledger.subnet_stake(coldkey, hotkey, netuid)

    def get_total_issuance(self) -> int:
        return self.ledger.total_issuance

    def get_block_emission(self) -> int:
        return _root.get_block_emission(self.ledger)


__all__ = ["SettlementEngine"]
