"""
Core datatypes shared by the settlement engine.

Minimal and immutable where appropriate so that the block transition stays
deterministic and testable.

Notes:
- Amounts are plain ints (rao or alpha base units).
- Emission denomination is a string tag: "TAO" for root-emitted TAO, "ALPHA"
  for subnet-issued alpha.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Tuple

Denomination = Literal["TAO", "ALPHA"]


# ---------------------------------------------------------------------------
# Epoch output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HotkeyEmission:
    """One epoch result row.

    Fields:
    - hotkey: recipient hotkey.
    - mining_emission: share attributed to serving/mining.
    - validator_emission: share attributed to validation.
    """

    hotkey: str
    mining_emission: int
    validator_emission: int

    @property
    def total(self) -> int:
        return self.mining_emission + self.validator_emission


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChildrenSet:
    hotkey: str
    netuid: int
    children: Tuple[Tuple[int, str], ...]
    block: int


@dataclass(frozen=True)
class NetworkAdded:
    netuid: int
    owner: str
    lock: int
    dynamic: bool
    block: int


@dataclass(frozen=True)
class NetworkRemoved:
    netuid: int
    refunded: int


@dataclass(frozen=True)
class StakeAdded:
    coldkey: str
    hotkey: str
    netuid: int  # ROOT_NETUID for plain TAO stake
    amount_in: int
    amount_out: int


@dataclass(frozen=True)
class StakeRemoved:
    coldkey: str
    hotkey: str
    netuid: int
    amount_in: int
    amount_out: int


# ---------------------------------------------------------------------------
# Block report
# ---------------------------------------------------------------------------

@dataclass
class BlockReport:
    """Summary of one `run_coinbase` call.

    Fields:
    - block: block number the transition ran for.
    - root_ok: False when the root allocator raised and was skipped.
    - emission_values: netuid -> emission value added to pending this block.
    - epochs_run: netuids whose epoch fired, ascending.
    - drained: (hotkey, amount) pairs in drain order.
    - issuance_delta: total issuance added by the drains.
    """

    block: int
    root_ok: bool = True
    emission_values: Dict[int, int] = field(default_factory=dict)
    epochs_run: List[int] = field(default_factory=list)
    drained: List[Tuple[str, int]] = field(default_factory=list)
    issuance_delta: int = 0


__all__ = [
    "Denomination",
    "HotkeyEmission",
    "ChildrenSet",
    "NetworkAdded",
    "NetworkRemoved",
    "StakeAdded",
    "StakeRemoved",
    "BlockReport",
]
