import pytest

from dtao_settlement.core import U16_MAX, U64_MAX
from dtao_settlement.emission import (
    accumulate_hotkey_emission,
    drain_hotkey_emission,
    hotkey_take_of,
    nominator_share,
)


def _link(state, parent, child, proportion, netuid=1):
    state.set_children(parent, netuid, state.get_children(parent, netuid) + [(proportion, child)])
    state.set_parents(child, netuid, state.get_parents(child, netuid) + [(proportion, parent)])


# -----------------------------
# Hotkey take
# -----------------------------


@pytest.mark.parametrize(
    "take,emission,expected",
    [
        (0, 1000, 0),
        (U16_MAX, 1000, 1000),
        (11_796, 1000, 179),
        (11_796, 2, 0),
        (U16_MAX // 2, 0, 0),
    ],
)
def test_hotkey_take(take, emission, expected):
    got = hotkey_take_of(take, emission)
    print(f"[take] take={take} emission={emission} -> {got}")
    assert got == expected


# -----------------------------
# Accumulation
# -----------------------------


def test_accumulate_without_parents_keeps_everything(state, ledger):
    state.ensure_hotkey("hk", owner="own")
    accumulate_hotkey_emission(ledger, "hk", 1, 500)
    assert state.pending_emission("hk") == 500


def test_accumulate_splits_with_parent_by_delegated_stake(state, ledger):
    state.ensure_hotkey("parent", owner="cp").take = 0
    state.ensure_hotkey("child", owner="cc").take = 0
    ledger.increase_stake("cp", "parent", 1000)
    ledger.increase_stake("cc", "child", 1000)
    _link(state, "parent", "child", U64_MAX)

    assert ledger.stake_with_children_and_parents("child", 1) == 2000
    assert ledger.stake_with_children_and_parents("parent", 1) == 0

    accumulate_hotkey_emission(ledger, "child", 1, 100)
    print(f"[accumulate] child={state.pending_emission('child')} parent={state.pending_emission('parent')}")
    assert state.pending_emission("parent") == 50
    assert state.pending_emission("child") == 50


def test_accumulate_take_stays_with_hotkey(state, ledger):
    state.ensure_hotkey("parent", owner="cp")
    state.ensure_hotkey("child", owner="cc").take = U16_MAX
    ledger.increase_stake("cp", "parent", 1000)
    _link(state, "parent", "child", U64_MAX)

    accumulate_hotkey_emission(ledger, "child", 1, 100)
    assert state.pending_emission("parent") == 0
    assert state.pending_emission("child") == 100


def test_accumulate_is_conservative_with_several_parents(state, ledger):
    state.ensure_hotkey("child", owner="cc").take = 0
    ledger.increase_stake("cc", "child", 7)
    for i, p in enumerate(["p0", "p1", "p2"]):
        state.ensure_hotkey(p, owner=f"c{p}")
        ledger.increase_stake(f"c{p}", p, 11 * (i + 1))
        _link(state, p, "child", U64_MAX // 3)

    emission = 1_000_003
    accumulate_hotkey_emission(ledger, "child", 1, emission)
    total = sum(state.pending_emission(h) for h in ["child", "p0", "p1", "p2"])
    assert total == emission
    assert state.pending_emission("p2") > state.pending_emission("p0") > 0


def test_accumulate_on_other_subnet_ignores_edges(state, ledger):
    state.ensure_hotkey("parent", owner="cp")
    state.ensure_hotkey("child", owner="cc").take = 0
    ledger.increase_stake("cp", "parent", 1000)
    _link(state, "parent", "child", U64_MAX, netuid=1)

    accumulate_hotkey_emission(ledger, "child", 2, 100)
    assert state.pending_emission("parent") == 0
    assert state.pending_emission("child") == 100


# -----------------------------
# Drain
# -----------------------------


def test_drain_pays_nominators_pro_rata(state, ledger):
    rec = state.ensure_hotkey("hk", owner="own")
    rec.take = 0
    rec.pending_emission = 1024
    ledger.increase_stake("a", "hk", 256)
    ledger.increase_stake("b", "hk", 768)

    drain_hotkey_emission(ledger, "hk", 1024, block=10)
    assert ledger.stake("a", "hk") == 512
    assert ledger.stake("b", "hk") == 1536
    assert ledger.stake("own", "hk") == 0
    assert rec.pending_emission == 0
    assert rec.last_drain_block == 10


def test_drain_credits_exactly_the_emission(state, ledger):
    state.ensure_hotkey("hk", owner="own").take = 0
    for ck, amt in (("a", 1), ("b", 2), ("c", 3)):
        ledger.increase_stake(ck, "hk", amt)
    before = ledger.total_stake_for_hotkey("hk")

    drain_hotkey_emission(ledger, "hk", 1_000_001, block=1)
    after = ledger.total_stake_for_hotkey("hk")
    print(f"[drain] stake {before} -> {after}, owner got {ledger.stake('own', 'hk')}")
    assert after - before == 1_000_001
    # floor(1_000_001 * s / 6) per nominator, rounding dust to the owner
    assert [ledger.stake(ck, "hk") for ck in ("a", "b", "c")] == [1 + 166_666, 2 + 333_333, 3 + 500_000]
    assert ledger.stake("own", "hk") == 2


def test_drain_skips_nominators_who_increased_stake(state, ledger):
    rec = state.ensure_hotkey("hk", owner="own")
    rec.take = 0
    ledger.increase_stake("a", "hk", 256)
    ledger.increase_stake("b", "hk", 768)
    state.mark_stake_increase("a", "hk", 5)

    drain_hotkey_emission(ledger, "hk", 1024, block=10)
    assert ledger.stake("a", "hk") == 256
    assert ledger.stake("b", "hk") == 768 + 768
    assert ledger.stake("own", "hk") == 256

    # next drain measures against block 10, so "a" is back in
    drain_hotkey_emission(ledger, "hk", 100, block=20)
    assert ledger.stake("a", "hk") > 256


def test_drain_take_goes_to_owner(state, ledger):
    rec = state.ensure_hotkey("hk", owner="own")
    rec.take = U16_MAX
    ledger.increase_stake("a", "hk", 100)

    drain_hotkey_emission(ledger, "hk", 40, block=1)
    assert ledger.stake("a", "hk") == 100
    assert ledger.stake("own", "hk") == 40


def test_drain_without_nominators_credits_unowned_hotkey(state, ledger):
    state.ensure_hotkey("lonely")
    drain_hotkey_emission(ledger, "lonely", 77, block=3)
    assert ledger.stake("lonely", "lonely") == 77


@pytest.mark.parametrize(
    "stakes,emission,credits",
    [
        ((1, 1, 1), 3, (1, 1, 1)),
        ((1, 2, 3), 6, (1, 2, 3)),
        ((3, 3, 3), 9, (3, 3, 3)),
        ((2, 5), 14, (4, 10)),
    ],
)
def test_drain_exact_shares_are_not_rounded_away(state, ledger, stakes, emission, credits):
    rec = state.ensure_hotkey("hk", owner="own")
    rec.take = 0
    coldkeys = [f"n{i}" for i in range(len(stakes))]
    for ck, amt in zip(coldkeys, stakes):
        ledger.increase_stake(ck, "hk", amt)

    drain_hotkey_emission(ledger, "hk", emission, block=1)
    got = tuple(ledger.stake(ck, "hk") - amt for ck, amt in zip(coldkeys, stakes))
    print(f"[drain-exact] stakes={stakes} emission={emission} -> credits={got}")
    assert got == credits
    assert ledger.stake("own", "hk") == 0


def test_drain_large_amounts_do_not_saturate(state, ledger):
    rec = state.ensure_hotkey("hk", owner="own")
    rec.take = 0
    ledger.increase_stake("a", "hk", 50 * 10**9)
    ledger.increase_stake("b", "hk", 150 * 10**9)

    drain_hotkey_emission(ledger, "hk", 7200 * 10**9, block=1)
    assert ledger.stake("a", "hk") == 50 * 10**9 + 1800 * 10**9
    assert ledger.stake("b", "hk") == 150 * 10**9 + 5400 * 10**9
    assert ledger.stake("own", "hk") == 0


def test_nominator_share():
    assert nominator_share(10, 1, 3) == 3
    assert nominator_share(10, 0, 3) == 0
    assert nominator_share(10, 5, 0) == 0
