import logging

import pytest

from dtao_settlement import EngineConfig, RootAllocator, SettlementEngine
from dtao_settlement.amm import DynamicPool
from dtao_settlement.coinbase import check_reserve_sync
from dtao_settlement.core import U64_MAX, InvariantViolation, RootEpochError
from dtao_settlement.state import SubnetState


class FailingAllocator(RootAllocator):
    def __init__(self):
        self.calls = 0

    def root_epoch(self, ledger, block):
        self.calls += 1
        raise RootEpochError(f"nothing to allocate at {block}")


# -----------------------------
# End-to-end block sequence
# -----------------------------


def test_static_subnet_pending_epoch_and_drain():
    eng = SettlementEngine(EngineConfig())
    eng.add_network(1, tempo=1)
    eng.set_emission_values([1], [1])
    # occupy index 0 so the staked hotkey drains on odd blocks
    eng.state.ensure_hotkey("hk0", owner="c0")
    eng.register_neuron(1, "hk", "ck")
    eng.add_balance("ck", 1000)
    eng.add_stake("ck", "hk", 1000, block=0)

    eng.run_coinbase(0)
    assert eng.get_pending_emission(1) == 1

    eng.run_coinbase(1)
    assert eng.get_pending_emission(1) == 0
    assert eng.get_stake("ck", "hk") == 1002
    print(f"[coinbase] block 1 stake={eng.get_stake('ck', 'hk')} issuance={eng.get_total_issuance()}")

    eng.set_hotkey_emission_tempo(2)
    eng.run_coinbase(2)
    assert eng.get_pending_emission(1) == 1

    eng.run_coinbase(3)
    assert eng.get_stake("ck", "hk") == 1004
    assert eng.get_total_issuance() == 4


def test_report_lists_epochs_and_drains():
    eng = SettlementEngine(EngineConfig(hotkey_emission_tempo=1))
    eng.add_network(1, tempo=1)
    eng.set_emission_values([1], [10])
    eng.register_neuron(1, "hk", "ck")

    r0 = eng.run_coinbase(0)
    assert r0.epochs_run == []
    assert r0.emission_values == {0: 0, 1: 10}

    r1 = eng.run_coinbase(1)
    assert r1.epochs_run == [1]
    assert r1.drained == [("hk", 20)]
    assert r1.issuance_delta == 20
    assert eng.get_total_issuance() == 20
    assert eng.get_total_stake_for_hotkey("hk") == 20


def test_root_pending_tracks_no_emission():
    eng = SettlementEngine()
    eng.add_network(1, tempo=1)
    eng.run_blocks(0, 5)
    assert eng.get_pending_emission(0) == 0


# -----------------------------
# Root allocator failures
# -----------------------------


def test_root_epoch_error_is_logged_and_skipped(caplog):
    alloc = FailingAllocator()
    eng = SettlementEngine(EngineConfig(), root_allocator=alloc)
    eng.add_network(1, tempo=10)
    eng.set_emission_values([1], [5])

    with caplog.at_level(logging.WARNING, logger="dtao_settlement.coinbase"):
        report = eng.run_coinbase(0)
    assert alloc.calls == 1
    assert report.root_ok is False
    assert eng.get_pending_emission(1) == 5
    assert any("root epoch skipped" in r.getMessage() for r in caplog.records)


def test_default_allocator_without_subnets_skips():
    eng = SettlementEngine()
    report = eng.run_coinbase(0)
    assert report.root_ok is False
    assert eng.get_total_issuance() == 0


# -----------------------------
# Reserve sync
# -----------------------------


def test_reserve_sync_holds_for_dynamic_subnets():
    eng = SettlementEngine(EngineConfig(default_tempo=2, hotkey_emission_tempo=3))
    eng.add_balance("owner", eng.get_network_lock_cost(0))
    netuid = eng.user_add_network("owner", "val", block=0)
    eng.add_balance("nom", 10**12)
    eng.add_subnet_stake("nom", "val", netuid, 10**11, block=0)
    eng.run_blocks(1, 20)
    s = eng.state.subnet(netuid)
    assert s.total_subnet_tao == s.pool.tao_reserve


def test_reserve_mismatch_raises(ledger, state):
    state.add_subnet(SubnetState(netuid=3, tempo=1, pool=DynamicPool(100, 100), total_subnet_tao=99))
    with pytest.raises(InvariantViolation):
        check_reserve_sync(ledger)


def test_coinbase_raises_on_reserve_mismatch():
    eng = SettlementEngine(root_allocator=FailingAllocator())
    eng.add_balance("owner", eng.get_network_lock_cost(0))
    netuid = eng.user_add_network("owner", "val", block=0)
    eng.state.subnet(netuid).pool.inject_tao(1)
    with pytest.raises(InvariantViolation):
        eng.run_coinbase(1)


# -----------------------------
# Epoch output through the delegation graph
# -----------------------------


def test_epoch_output_shared_with_parent(fixed_epoch):
    epoch = fixed_epoch({1: [("child", 1)]})
    eng = SettlementEngine(EngineConfig(hotkey_emission_tempo=1), epoch=epoch)
    eng.add_network(1, tempo=1, owner="cold")
    eng.register_neuron(1, "parent", "cold")
    eng.register_neuron(1, "child", "cold")
    eng.set_delegate_take("parent", 0)
    eng.set_delegate_take("child", 0)
    for ck, hk in (("np", "parent"), ("nc", "child")):
        eng.add_balance(ck, 1000)
        eng.add_stake(ck, hk, 1000, block=0)
    eng.set_children("cold", "parent", 1, [(U64_MAX, "child")], block=0)
    eng.set_emission_values([1], [50])

    eng.run_blocks(0, 1)
    assert epoch.calls == [(1, 100)]
    assert eng.get_stake("np", "parent") == 1050
    assert eng.get_stake("nc", "child") == 1050
    assert eng.get_total_issuance() == 100
