"""
Owned state store for the settlement engine.

All maps the block transition reads or writes live on one `State` object and
are reached through typed accessors. Reads return copies of lists so callers
cannot alias internal storage.

Ordering guarantees:
- `netuids()` is ascending.
- `hotkeys_by_index()` yields hotkeys in their monotonically assigned index
  order (the index is fixed when a hotkey record is first created).
- `nominators(hotkey)` yields coldkeys in stake insertion order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .amm import DynamicPool
from .config import EngineConfig
from .core.constants import ROOT_NETUID
from .core.datatypes import Denomination
from .core.exc import SubNetworkDoesNotExist

# Edge list entry: (proportion as u64 fraction of u64::MAX, hotkey)
Edge = Tuple[int, str]


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass
class SubnetState:
    """Per-subnet record.

    `pool` is None for static (legacy) subnets. `total_subnet_tao` tracks
    the TAO held by the subnet and equals `pool.tao_reserve` for dynamic
    subnets at every block boundary.
    """

    netuid: int
    tempo: int
    emission_value: int = 0
    pending_emission: int = 0
    denomination: Denomination = "TAO"
    pool: Optional[DynamicPool] = None
    total_subnet_tao: int = 0
    owner: Optional[str] = None
    registered_at: int = 0
    locked: int = 0
    neurons: List[str] = field(default_factory=list)

    @property
    def is_dynamic(self) -> bool:
        return self.pool is not None


@dataclass
class HotkeyRecord:
    hotkey: str
    index: int
    owner: Optional[str]
    take: int
    pending_emission: int = 0
    last_drain_block: int = 0


@dataclass
class NominatorStake:
    amount: int = 0
    last_increase_block: int = 0


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

class State:
    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config if config is not None else EngineConfig()
        self.block: int = 0
        self.total_issuance: int = 0

        self._subnets: Dict[int, SubnetState] = {}
        self._hotkeys: Dict[str, HotkeyRecord] = {}
        self._next_hotkey_index: int = 0
        self._stake: Dict[str, Dict[str, NominatorStake]] = {}
        self._children: Dict[Tuple[str, int], List[Edge]] = {}
        self._parents: Dict[Tuple[str, int], List[Edge]] = {}
        self._balances: Dict[str, int] = {}
        self._subnet_stake: Dict[Tuple[str, str, int], int] = {}
        self._last_tx: Dict[Tuple[str, str], int] = {}

        # lock cost registers
        self.last_lock: int = self.config.network_min_lock
        self.last_lock_block: Optional[int] = None

        self.events: List[object] = []

        self._subnets[ROOT_NETUID] = SubnetState(netuid=ROOT_NETUID, tempo=0)

    # ------------- subnets -------------

    def netuids(self) -> List[int]:
        return sorted(self._subnets)

    def subnet_exists(self, netuid: int) -> bool:
        return netuid in self._subnets

    def get_subnet(self, netuid: int) -> Optional[SubnetState]:
        return self._subnets.get(netuid)

    def subnet(self, netuid: int) -> SubnetState:
        s = self._subnets.get(netuid)
        if s is None:
            raise SubNetworkDoesNotExist(f"netuid {netuid} does not exist")
        return s

    def subnets(self) -> List[SubnetState]:
        """Subnet records in ascending netuid order."""
        return [self._subnets[n] for n in sorted(self._subnets)]

    def add_subnet(self, subnet: SubnetState) -> None:
        if subnet.netuid in self._subnets:
            raise ValueError(f"netuid {subnet.netuid} already registered")
        self._subnets[subnet.netuid] = subnet

    def remove_subnet(self, netuid: int) -> SubnetState:
        """Drop the subnet record together with every delegation edge on it."""
        s = self.subnet(netuid)
        del self._subnets[netuid]
        for key in [k for k in self._children if k[1] == netuid]:
            del self._children[key]
        for key in [k for k in self._parents if k[1] == netuid]:
            del self._parents[key]
        return s

    def first_free_netuid(self) -> int:
        n = ROOT_NETUID + 1
        while n in self._subnets:
            n += 1
        return n

    # ------------- hotkeys -------------

    def hotkey_exists(self, hotkey: str) -> bool:
        return hotkey in self._hotkeys

    def get_hotkey(self, hotkey: str) -> Optional[HotkeyRecord]:
        return self._hotkeys.get(hotkey)

    def ensure_hotkey(self, hotkey: str, owner: Optional[str] = None) -> HotkeyRecord:
        """Return the hotkey record, creating it (with the next index) if missing.

        An existing record keeps its owner; an ownerless record adopts `owner`.
        """
        rec = self._hotkeys.get(hotkey)
        if rec is None:
            rec = HotkeyRecord(
                hotkey=hotkey,
                index=self._next_hotkey_index,
                owner=owner,
                take=self.config.default_take,
            )
            self._next_hotkey_index += 1
            self._hotkeys[hotkey] = rec
        elif rec.owner is None and owner is not None:
            rec.owner = owner
        return rec

    def hotkeys_by_index(self) -> Iterator[HotkeyRecord]:
        # indices are assigned monotonically on insert, so insertion order is index order
        return iter(list(self._hotkeys.values()))

    def pending_emission(self, hotkey: str) -> int:
        rec = self._hotkeys.get(hotkey)
        return rec.pending_emission if rec is not None else 0

    # ------------- nominator stake -------------

    def nominators(self, hotkey: str) -> List[Tuple[str, NominatorStake]]:
        noms = self._stake.get(hotkey, {})
        return [(ck, NominatorStake(r.amount, r.last_increase_block)) for ck, r in noms.items()]

    def get_stake(self, coldkey: str, hotkey: str) -> int:
        rec = self._stake.get(hotkey, {}).get(coldkey)
        return rec.amount if rec is not None else 0

    def set_stake(self, coldkey: str, hotkey: str, amount: int,
                  last_increase_block: Optional[int] = None) -> None:
        noms = self._stake.setdefault(hotkey, {})
        rec = noms.get(coldkey)
        if rec is None:
            rec = NominatorStake()
            noms[coldkey] = rec
        rec.amount = amount
        if last_increase_block is not None:
            rec.last_increase_block = last_increase_block

    def mark_stake_increase(self, coldkey: str, hotkey: str, block: int) -> None:
        """Record a user-driven stake increase on an existing nominator position."""
        rec = self._stake.get(hotkey, {}).get(coldkey)
        if rec is not None:
            rec.last_increase_block = block

    def last_increase_block(self, coldkey: str, hotkey: str) -> int:
        rec = self._stake.get(hotkey, {}).get(coldkey)
        return rec.last_increase_block if rec is not None else 0

    def stake_hotkeys(self) -> List[str]:
        return list(self._stake)

    # ------------- delegation edges -------------

    def get_children(self, hotkey: str, netuid: int) -> List[Edge]:
        return list(self._children.get((hotkey, netuid), []))

    def set_children(self, hotkey: str, netuid: int, children: List[Edge]) -> None:
        if children:
            self._children[(hotkey, netuid)] = list(children)
        else:
            self._children.pop((hotkey, netuid), None)

    def get_parents(self, child: str, netuid: int) -> List[Edge]:
        return list(self._parents.get((child, netuid), []))

    def set_parents(self, child: str, netuid: int, parents: List[Edge]) -> None:
        if parents:
            self._parents[(child, netuid)] = list(parents)
        else:
            self._parents.pop((child, netuid), None)

    # ------------- balances -------------

    def get_balance(self, coldkey: str) -> int:
        return self._balances.get(coldkey, 0)

    def set_balance(self, coldkey: str, amount: int) -> None:
        self._balances[coldkey] = amount

    # ------------- subnet alpha stake -------------

    def get_subnet_stake(self, coldkey: str, hotkey: str, netuid: int) -> int:
        return self._subnet_stake.get((coldkey, hotkey, netuid), 0)

    def set_subnet_stake(self, coldkey: str, hotkey: str, netuid: int, amount: int) -> None:
        if amount:
            self._subnet_stake[(coldkey, hotkey, netuid)] = amount
        else:
            self._subnet_stake.pop((coldkey, hotkey, netuid), None)

    def subnet_stakes(self, netuid: int) -> List[Tuple[str, str, int]]:
        """(coldkey, hotkey, alpha) for every position on `netuid`."""
        return [(ck, hk, v) for (ck, hk, n), v in self._subnet_stake.items() if n == netuid]

    # ------------- rate limits -------------

    def last_tx_block(self, kind: str, hotkey: str) -> Optional[int]:
        return self._last_tx.get((kind, hotkey))

    def set_last_tx_block(self, kind: str, hotkey: str, block: int) -> None:
        self._last_tx[(kind, hotkey)] = block

    # ------------- events -------------

    def emit(self, event: object) -> None:
        self.events.append(event)


__all__ = [
    "Edge",
    "SubnetState",
    "HotkeyRecord",
    "NominatorStake",
    "State",
]
