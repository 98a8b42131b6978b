"""
Network lock cost and subnet registration.

Registering a subnet locks TAO. The price doubles right after each
registration and then decays linearly back to the floor:

    cost(block) = max(min_lock, L * mult - L * (block - last_block) // interval)

where L is the last lock paid, `mult` is 2 once any subnet has been
registered (1 before), and `interval` is the lock reduction interval. One
interval after a registration the cost equals L again; after two it is back
at `min_lock`.
"""

from __future__ import annotations

import logging
from typing import Optional

from .amm import DynamicPool
from .core.amounts import saturating_mul, saturating_sub
from .core.constants import ROOT_NETUID
from .core.datatypes import NetworkAdded, NetworkRemoved
from .core.exc import (
    NonAssociatedColdKey,
    NotAllowedToDissolve,
    NotEnoughBalance,
    RegistrationNotPermittedOnRootSubnet,
    SubNetworkDoesNotExist,
)
from .ledger import Ledger
from .state import State, SubnetState

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lock cost
# ---------------------------------------------------------------------------

def get_network_lock_cost(state: State, block: int) -> int:
    cfg = state.config
    last_lock = state.last_lock
    if state.last_lock_block is None:
        mult = 1
        elapsed = 0
    else:
        mult = 2
        elapsed = saturating_sub(block, state.last_lock_block)
    reduction = saturating_mul(last_lock, elapsed) // cfg.lock_reduction_interval
    cost = saturating_sub(saturating_mul(last_lock, mult), reduction)
    return max(cost, cfg.network_min_lock)


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

def add_network(state: State, netuid: int, tempo: int, owner: Optional[str] = None, block: int = 0) -> SubnetState:
    """Create a static subnet directly (no lock, no pool)."""
    if netuid == ROOT_NETUID:
        raise RegistrationNotPermittedOnRootSubnet("root network already exists")
    subnet = SubnetState(netuid=netuid, tempo=tempo, owner=owner, registered_at=block)
    state.add_subnet(subnet)
    logger.info("network added: netuid=%d tempo=%d (static)", netuid, tempo)
    return subnet


def register_neuron(state: State, netuid: int, hotkey: str, coldkey: str) -> None:
    if netuid == ROOT_NETUID:
        raise RegistrationNotPermittedOnRootSubnet("neurons cannot register on root")
    subnet = state.subnet(netuid)
    rec = state.get_hotkey(hotkey)
    if rec is not None and rec.owner is not None and rec.owner != coldkey:
        raise NonAssociatedColdKey(f"{coldkey!r} does not own {hotkey!r}")
    state.ensure_hotkey(hotkey, owner=coldkey)
    if hotkey not in subnet.neurons:
        subnet.neurons.append(hotkey)


def user_add_network(ledger: Ledger, coldkey: str, hotkey: str, block: int, dynamic: bool = True) -> int:
    """Pay the lock cost and register a new subnet owned by `coldkey`; returns its netuid."""
    state = ledger.state
    rec = state.get_hotkey(hotkey)
    if rec is not None and rec.owner is not None and rec.owner != coldkey:
        raise NonAssociatedColdKey(f"{coldkey!r} does not own {hotkey!r}")

    lock = get_network_lock_cost(state, block)
    available = ledger.balance(coldkey)
    if available < lock:
        raise NotEnoughBalance(required=lock, available=available)

    ledger.remove_balance(coldkey, lock)
    state.last_lock = lock
    state.last_lock_block = block

    netuid = state.first_free_netuid()
    subnet = SubnetState(
        netuid=netuid,
        tempo=state.config.default_tempo,
        owner=coldkey,
        registered_at=block,
    )
    if dynamic:
        n_dynamic = 1 + sum(1 for s in state.subnets() if s.is_dynamic)
        alpha = lock * n_dynamic
        subnet.pool = DynamicPool(tao_reserve=lock, alpha_reserve=alpha)
        subnet.total_subnet_tao = lock
        subnet.denomination = "ALPHA"
    else:
        subnet.locked = lock
    state.add_subnet(subnet)

    register_neuron(state, netuid, hotkey, coldkey)
    if dynamic:
        ledger.increase_subnet_stake(coldkey, hotkey, netuid, subnet.pool.alpha_reserve)

    state.emit(NetworkAdded(netuid=netuid, owner=coldkey, lock=lock, dynamic=dynamic, block=block))
    logger.info("network registered: netuid=%d owner=%s lock=%d dynamic=%s", netuid, coldkey, lock, dynamic)
    return netuid


def dissolve_network(ledger: Ledger, coldkey: str, netuid: int) -> int:
    """Remove a static subnet owned by `coldkey`; returns the TAO refunded."""
    state = ledger.state
    if netuid == ROOT_NETUID:
        raise NotAllowedToDissolve("the root network cannot be dissolved")
    subnet = state.get_subnet(netuid)
    if subnet is None:
        raise SubNetworkDoesNotExist(f"netuid {netuid} does not exist")
    if subnet.is_dynamic:
        raise NotAllowedToDissolve(f"netuid {netuid} is dynamic")
    if subnet.owner != coldkey:
        raise NonAssociatedColdKey(f"{coldkey!r} does not own netuid {netuid}")

    # static stake converts 1:1 back to balance
    for ck, hk, amount in state.subnet_stakes(netuid):
        state.set_subnet_stake(ck, hk, netuid, 0)
        ledger.add_balance(ck, amount)

    refund = subnet.locked
    state.remove_subnet(netuid)
    ledger.add_balance(coldkey, refund)
    state.emit(NetworkRemoved(netuid=netuid, refunded=refund))
    logger.info("network dissolved: netuid=%d refunded=%d", netuid, refund)
    return refund


__all__ = [
    "get_network_lock_cost",
    "add_network",
    "register_neuron",
    "user_add_network",
    "dissolve_network",
]
