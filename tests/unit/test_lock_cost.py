import pytest

from dtao_settlement import EngineConfig, SettlementEngine
from dtao_settlement.core import (
    I64F64,
    NetworkAdded,
    NetworkRemoved,
    NonAssociatedColdKey,
    NotAllowedToDissolve,
    NotEnoughBalance,
    RegistrationNotPermittedOnRootSubnet,
    SubNetworkDoesNotExist,
)

MIN_LOCK = EngineConfig().network_min_lock
INTERVAL = EngineConfig().lock_reduction_interval


def _register(eng, coldkey, hotkey, block=0, dynamic=True):
    eng.add_balance(coldkey, eng.get_network_lock_cost(block))
    return eng.user_add_network(coldkey, hotkey, dynamic=dynamic, block=block)


# -----------------------------
# Lock cost schedule
# -----------------------------


def test_cost_before_any_registration_is_min_lock(engine):
    assert engine.get_network_lock_cost(0) == MIN_LOCK
    assert engine.get_network_lock_cost(10 * INTERVAL) == MIN_LOCK


@pytest.mark.parametrize(
    "elapsed,expected",
    [
        (0, 2 * MIN_LOCK),
        (INTERVAL // 2, 2 * MIN_LOCK - MIN_LOCK // 2),
        (INTERVAL, MIN_LOCK),
        (2 * INTERVAL, MIN_LOCK),
        (5 * INTERVAL, MIN_LOCK),
    ],
)
def test_cost_doubles_then_decays(engine, elapsed, expected):
    _register(engine, "c1", "h1", block=100)
    got = engine.get_network_lock_cost(100 + elapsed)
    print(f"[lock] elapsed={elapsed} cost={got}")
    assert got == expected


def test_back_to_back_registrations_keep_doubling(engine):
    _register(engine, "c1", "h1", block=0)
    _register(engine, "c2", "h2", block=0)
    assert engine.state.last_lock == 2 * MIN_LOCK
    assert engine.get_network_lock_cost(0) == 4 * MIN_LOCK
    assert engine.get_network_lock_cost(INTERVAL) == 2 * MIN_LOCK


# -----------------------------
# user_add_network
# -----------------------------


def test_dynamic_registration_seeds_pool_and_owner_stake(engine):
    netuid = _register(engine, "c1", "h1")
    s = engine.state.subnet(netuid)
    assert netuid == 1
    assert s.is_dynamic and s.owner == "c1"
    assert s.pool.snapshot()[:2] == (MIN_LOCK, MIN_LOCK)
    assert s.total_subnet_tao == MIN_LOCK
    assert s.tempo == engine.config.default_tempo
    assert engine.get_balance("c1") == 0
    assert engine.get_subnet_stake("c1", "h1", netuid) == MIN_LOCK
    assert "h1" in s.neurons
    ev = engine.state.events[-1]
    assert ev == NetworkAdded(netuid=1, owner="c1", lock=MIN_LOCK, dynamic=True, block=0)


def test_second_dynamic_subnet_starts_at_half_price(engine):
    _register(engine, "c1", "h1")
    netuid = _register(engine, "c2", "h2")
    s = engine.state.subnet(netuid)
    lock = 2 * MIN_LOCK
    assert s.pool.tao_reserve == lock
    assert s.pool.alpha_reserve == 2 * lock
    assert engine.get_tao_per_alpha_price(netuid) == I64F64.from_ratio(1, 2)


def test_static_registration_locks_tao(engine):
    netuid = _register(engine, "c1", "h1", dynamic=False)
    s = engine.state.subnet(netuid)
    assert not s.is_dynamic
    assert s.locked == MIN_LOCK
    assert engine.get_subnet_stake("c1", "h1", netuid) == 0


def test_registration_takes_first_free_netuid(engine):
    engine.add_network(1, tempo=1)
    engine.add_network(3, tempo=1)
    assert _register(engine, "c1", "h1") == 2
    assert _register(engine, "c2", "h2") == 4


def test_registration_needs_balance(engine):
    engine.add_balance("c1", MIN_LOCK - 1)
    with pytest.raises(NotEnoughBalance) as ei:
        engine.user_add_network("c1", "h1", block=0)
    assert (ei.value.required, ei.value.available) == (MIN_LOCK, MIN_LOCK - 1)
    assert engine.get_balance("c1") == MIN_LOCK - 1
    assert engine.state.netuids() == [0]
    assert engine.state.last_lock_block is None


def test_registration_rejects_foreign_hotkey(engine):
    _register(engine, "c1", "h1")
    engine.add_balance("c2", 10 * MIN_LOCK)
    with pytest.raises(NonAssociatedColdKey):
        engine.user_add_network("c2", "h1", block=0)


# -----------------------------
# Direct registration helpers
# -----------------------------


def test_add_network_and_register_neuron_guards(engine):
    with pytest.raises(RegistrationNotPermittedOnRootSubnet):
        engine.add_network(0, tempo=1)
    with pytest.raises(RegistrationNotPermittedOnRootSubnet):
        engine.register_neuron(0, "h", "c")
    with pytest.raises(SubNetworkDoesNotExist):
        engine.register_neuron(5, "h", "c")
    engine.add_network(1, tempo=1)
    engine.register_neuron(1, "h", "c")
    with pytest.raises(NonAssociatedColdKey):
        engine.register_neuron(1, "h", "other")
    engine.register_neuron(1, "h", "c")
    assert engine.state.subnet(1).neurons == ["h"]


# -----------------------------
# Dissolve
# -----------------------------


def test_dissolve_static_refunds_lock_and_stakes(engine):
    netuid = _register(engine, "c1", "h1", dynamic=False)
    engine.add_balance("nom", 500)
    engine.add_subnet_stake("nom", "h1", netuid, 500, block=0)
    engine.set_children("c1", "h1", netuid, [(1, "h2")], block=0)

    refund = engine.dissolve_network("c1", netuid)
    assert refund == MIN_LOCK
    assert engine.get_balance("c1") == MIN_LOCK
    assert engine.get_balance("nom") == 500
    assert engine.get_subnet_stake("nom", "h1", netuid) == 0
    assert not engine.state.subnet_exists(netuid)
    assert engine.get_children("h1", netuid) == []
    assert engine.state.events[-1] == NetworkRemoved(netuid=netuid, refunded=MIN_LOCK)


@pytest.mark.parametrize(
    "caller,netuid,exc",
    [
        ("c1", 0, NotAllowedToDissolve),
        ("c1", 9, SubNetworkDoesNotExist),
        ("c1", 1, NotAllowedToDissolve),
        ("c2", 2, NonAssociatedColdKey),
    ],
)
def test_dissolve_rejects(engine, caller, netuid, exc):
    _register(engine, "c1", "h1", dynamic=True)
    _register(engine, "c1", "h2", dynamic=False)
    with pytest.raises(exc):
        engine.dissolve_network(caller, netuid)
    assert engine.state.netuids() == [0, 1, 2]
