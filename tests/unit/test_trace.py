import pandas as pd

from dtao_settlement import BlockTrace, EngineConfig, SettlementEngine
from dtao_settlement.trace import COLUMNS


def _engine():
    eng = SettlementEngine(EngineConfig(default_tempo=2))
    eng.add_balance("owner", eng.get_network_lock_cost(0))
    eng.user_add_network("owner", "val", block=0)
    eng.add_network(2, tempo=1)
    return eng


def test_trace_rows_per_block_and_subnet():
    eng = _engine()
    trace = BlockTrace()
    eng.run_blocks(1, 4, trace=trace)
    assert len(trace) == 4 * 3

    df = trace.to_frame()
    assert list(df.columns) == COLUMNS
    assert df["block"].tolist() == [b for b in range(1, 5) for _ in range(3)]
    assert df["netuid"].tolist() == [0, 1, 2] * 4
    print(df.head(6).to_string())


def test_trace_values_follow_state():
    eng = _engine()
    trace = BlockTrace()
    eng.run_blocks(1, 3, trace=trace)
    df = trace.to_frame()

    dyn = df[df["netuid"] == 1]
    assert dyn["dynamic"].all()
    assert (dyn["tao_reserve"] == dyn["total_subnet_tao"]).all()
    assert dyn["denomination"].tolist() == ["ALPHA", "TAO", "ALPHA"]
    assert dyn["price"].tolist()[:2] == ["0.990099009", "1.000000000"]

    static = df[df["netuid"] == 2]
    assert not static["dynamic"].any()
    assert (static["tao_reserve"] == 0).all()
    assert static["price"].iloc[-1] == "1.000000000"
    assert df["root_ok"].all()


def test_trace_to_csv(tmp_path):
    eng = _engine()
    trace = BlockTrace()
    eng.run_blocks(1, 2, trace=trace)
    out = tmp_path / "trace.csv"
    trace.to_csv(out)
    back = pd.read_csv(out)
    assert list(back.columns) == COLUMNS
    assert len(back) == len(trace)
