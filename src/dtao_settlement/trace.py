"""
Per-block trace recorder.

`BlockTrace.record` snapshots every subnet after a `run_coinbase` call; the
rows can be exported as a pandas DataFrame for analysis or CSV output.
Prices are written as decimal strings so the trace never carries floats
derived from fixed-point state.
"""

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from .core.datatypes import BlockReport
from .core.fmt import fmt_fixed
from .state import State
from .staking import get_tao_per_alpha_price

COLUMNS = [
    "block",
    "netuid",
    "tempo",
    "dynamic",
    "emission_value",
    "denomination",
    "pending_emission",
    "tao_reserve",
    "alpha_reserve",
    "total_subnet_tao",
    "price",
    "epoch_ran",
    "root_ok",
    "total_issuance",
]


class BlockTrace:
    def __init__(self):
        self.rows: List[Dict[str, Any]] = []

    def __len__(self) -> int:
        return len(self.rows)

    def record(self, state: State, report: BlockReport) -> None:
        ran = set(report.epochs_run)
        for s in state.subnets():
            tao, alpha = (s.pool.tao_reserve, s.pool.alpha_reserve) if s.is_dynamic else (0, 0)
            self.rows.append({
                "block": report.block,
                "netuid": s.netuid,
                "tempo": s.tempo,
                "dynamic": s.is_dynamic,
                "emission_value": s.emission_value,
                "denomination": s.denomination,
                "pending_emission": s.pending_emission,
                "tao_reserve": tao,
                "alpha_reserve": alpha,
                "total_subnet_tao": s.total_subnet_tao,
                "price": fmt_fixed(get_tao_per_alpha_price(state, s.netuid)),
                "epoch_ran": s.netuid in ran,
                "root_ok": report.root_ok,
                "total_issuance": state.total_issuance,
            })

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.rows, columns=COLUMNS)

    def to_csv(self, path) -> None:
        self.to_frame().to_csv(path, index=False)


__all__ = ["BlockTrace", "COLUMNS"]
