"""
Top-level API for dtao_settlement (integer-domain).

Per-block settlement of subnet emission: root allocation, subnet pending
emission, epochs, hotkey accumulation through the delegation graph, and the
periodic drain to nominators. Dynamic subnets route value through
constant-product TAO/alpha pools.

The stable surface is `SettlementEngine` plus the configuration, trace and
core integer-domain types. Individual operations remain importable from
their modules (`coinbase`, `emission`, `children`, ...).
"""

from __future__ import annotations

from .config import EngineConfig
from .engine import SettlementEngine
from .epoch import EpochDistributor, StakeWeightedEpoch
from .root import RootAllocator, DynamicRootAllocator
from .trace import BlockTrace

from .core import (
    I64F64,
    U64F64,
    I96F32,
    BlockReport,
    HotkeyEmission,
    DispatchError,
    InvariantViolation,
    RootEpochError,
)

__all__ = [
    # engine
    "SettlementEngine",
    "EngineConfig",
    # collaborators
    "EpochDistributor",
    "StakeWeightedEpoch",
    "RootAllocator",
    "DynamicRootAllocator",
    # reporting
    "BlockTrace",
    "BlockReport",
    # core types
    "I64F64",
    "U64F64",
    "I96F32",
    "HotkeyEmission",
    "DispatchError",
    "InvariantViolation",
    "RootEpochError",
]
