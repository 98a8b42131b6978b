#!/usr/bin/env python3
"""
Run the settlement engine over a block range from a JSON scenario and write
the per-subnet trace as CSV.

Scenario layout:

    {
      "engine":  { EngineConfig overrides },
      "blocks":  500,
      "subnets": [{"owner": ..., "hotkey": ..., "dynamic": true, "tempo": 20}],
      "stakes":  [{"coldkey": ..., "hotkey": ..., "amount_tao": "50"}]
    }

Subnets are registered at block 0 in list order (each owner is funded with
exactly the lock cost). Stakes are funded and added at block 0; amounts
are given either in rao (`amount`) or as a TAO decimal string (`amount_tao`).
"""

from __future__ import annotations

import argparse
import json
import logging
from decimal import Decimal
from pathlib import Path

from dtao_settlement import BlockTrace, EngineConfig, SettlementEngine
from dtao_settlement.core.amounts import rao_from_tao_in
from dtao_settlement.core.fmt import fmt_fixed, fmt_tao


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run a dTAO settlement simulation.")
    p.add_argument("--config", default="configs/simulation.default.json", help="Scenario JSON")
    p.add_argument("--blocks", type=int, default=None, help="Override number of blocks to run")
    p.add_argument("--out", default="simulation_trace.csv", help="CSV output path")
    p.add_argument("--log-level", default="WARNING", help="Python logging level")
    return p.parse_args()


def build_engine(scenario: dict) -> SettlementEngine:
    engine = SettlementEngine(EngineConfig.from_dict(scenario.get("engine", {})))

    for sn in scenario.get("subnets", []):
        lock = engine.get_network_lock_cost(block=0)
        engine.add_balance(sn["owner"], lock)
        netuid = engine.user_add_network(sn["owner"], sn["hotkey"], dynamic=sn.get("dynamic", True), block=0)
        if "tempo" in sn:
            engine.set_tempo(netuid, int(sn["tempo"]))

    for st in scenario.get("stakes", []):
        if "amount_tao" in st:
            amount = rao_from_tao_in(Decimal(str(st["amount_tao"])))
        else:
            amount = int(st["amount"])
        engine.add_balance(st["coldkey"], amount)
        engine.add_stake(st["coldkey"], st["hotkey"], amount, block=0)

    return engine


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    with open(args.config, "r", encoding="utf-8") as f:
        scenario = json.load(f)

    engine = build_engine(scenario)
    blocks = args.blocks if args.blocks is not None else int(scenario.get("blocks", 100))

    trace = BlockTrace()
    engine.run_blocks(1, blocks, trace=trace)
    trace.to_csv(Path(args.out))

    print("\n=== Simulation summary ===")
    print(f"blocks          : {blocks}")
    print(f"total_issuance  : {fmt_tao(engine.get_total_issuance())} TAO")
    print(f"total_stake     : {fmt_tao(engine.ledger.total_stake())} TAO")
    for s in engine.state.subnets():
        if not s.is_dynamic:
            continue
        price = engine.get_tao_per_alpha_price(s.netuid)
        print(
            f"netuid {s.netuid:<3}: tao={fmt_tao(s.pool.tao_reserve)} "
            f"alpha={fmt_tao(s.pool.alpha_reserve)} price={fmt_fixed(price)}"
        )
    print(f"trace rows      : {len(trace)} -> {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
