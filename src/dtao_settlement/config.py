"""
Engine configuration.

`EngineConfig` carries the chain knobs the block transition reads. Values are
integers (blocks, rao, u16 fractions) except `price_threshold`, which is an
I64F64 converted once at the I/O boundary.

JSON layout (all keys optional, unknown keys rejected):

    {
      "hotkey_emission_tempo": 7200,
      "default_tempo": 360,
      "network_min_lock": 100000000000,
      "lock_reduction_interval": 100800,
      "price_threshold": "1.0",
      "default_block_emission": 1000000000,
      "total_supply": 21000000000000000,
      "default_take": 11796,
      "set_children_rate_limit": 150,
      "subnet_owner_lock_period": 648000
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Union

from .core.constants import (
    U16_MAX,
    DEFAULT_HOTKEY_EMISSION_TEMPO,
    DEFAULT_TEMPO,
    DEFAULT_NETWORK_MIN_LOCK,
    DEFAULT_LOCK_REDUCTION_INTERVAL,
    DEFAULT_PRICE_THRESHOLD,
    DEFAULT_BLOCK_EMISSION,
    DEFAULT_TOTAL_SUPPLY,
    DEFAULT_TAKE,
    DEFAULT_SET_CHILDREN_RATE_LIMIT,
    DEFAULT_SUBNET_OWNER_LOCK_PERIOD,
)
from .core.fixed import I64F64

_INT_FIELDS = (
    "hotkey_emission_tempo",
    "default_tempo",
    "network_min_lock",
    "lock_reduction_interval",
    "default_block_emission",
    "total_supply",
    "default_take",
    "set_children_rate_limit",
    "subnet_owner_lock_period",
)


@dataclass
class EngineConfig:
    hotkey_emission_tempo: int = DEFAULT_HOTKEY_EMISSION_TEMPO
    default_tempo: int = DEFAULT_TEMPO
    network_min_lock: int = DEFAULT_NETWORK_MIN_LOCK
    lock_reduction_interval: int = DEFAULT_LOCK_REDUCTION_INTERVAL
    price_threshold: I64F64 = field(
        default_factory=lambda: I64F64.from_decimal(DEFAULT_PRICE_THRESHOLD)
    )
    default_block_emission: int = DEFAULT_BLOCK_EMISSION
    total_supply: int = DEFAULT_TOTAL_SUPPLY
    default_take: int = DEFAULT_TAKE
    set_children_rate_limit: int = DEFAULT_SET_CHILDREN_RATE_LIMIT
    subnet_owner_lock_period: int = DEFAULT_SUBNET_OWNER_LOCK_PERIOD

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        for name in _INT_FIELDS:
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int):
                raise ValueError(f"{name} must be an int, got {v!r}")
            if v < 0:
                raise ValueError(f"{name} must be >= 0, got {v}")
        if self.hotkey_emission_tempo == 0:
            raise ValueError("hotkey_emission_tempo must be > 0")
        if self.lock_reduction_interval == 0:
            raise ValueError("lock_reduction_interval must be > 0")
        if self.default_take > U16_MAX:
            raise ValueError(f"default_take exceeds u16::MAX: {self.default_take}")
        if self.default_tempo > U16_MAX:
            raise ValueError(f"default_tempo exceeds u16::MAX: {self.default_tempo}")
        if not isinstance(self.price_threshold, I64F64):
            raise ValueError("price_threshold must be I64F64")
        if self.price_threshold.is_negative():
            raise ValueError("price_threshold must be >= 0")

    # ------------- loaders -------------

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "EngineConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ValueError(f"unknown config keys: {unknown}")
        kwargs = dict(raw)
        if "price_threshold" in kwargs:
            kwargs["price_threshold"] = _parse_threshold(kwargs["price_threshold"])
        return cls(**kwargs)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "EngineConfig":
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError(f"config root must be an object: {path}")
        return cls.from_dict(raw)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {name: getattr(self, name) for name in _INT_FIELDS}
        out["price_threshold"] = str(self.price_threshold.to_decimal().normalize())
        return out


def _parse_threshold(v: Any) -> I64F64:
    if isinstance(v, I64F64):
        return v
    if isinstance(v, (bool, float)):
        raise ValueError("price_threshold must be a decimal string or int")
    try:
        d = Decimal(str(v))
    except InvalidOperation as e:
        raise ValueError(f"invalid price_threshold: {v!r}") from e
    if not d.is_finite():
        raise ValueError(f"invalid price_threshold: {v!r}")
    return I64F64.from_decimal(d)


__all__ = ["EngineConfig"]
