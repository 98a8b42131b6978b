"""
Staking operations.

- TAO stake (`add_stake` / `remove_stake`) moves free balance into a
  (coldkey, hotkey) nominator position. Adding stake marks the position so
  that its next hotkey drain skips it.
- Subnet stake (`add_subnet_stake` / `remove_subnet_stake`) swaps TAO for
  subnet alpha through the subnet's pool; static subnets convert 1:1.
  `total_subnet_tao` follows every TAO movement into or out of a subnet.

Every check runs before the first write, so a dispatch error leaves state
untouched.
"""

from __future__ import annotations

import logging

from .core.amounts import ensure_u64
from .core.constants import ROOT_NETUID
from .core.datatypes import StakeAdded, StakeRemoved
from .core.exc import (
    HotKeyAccountNotExists,
    NotEnoughBalance,
    NotEnoughStakeToWithdraw,
    RegistrationNotPermittedOnRootSubnet,
    SubnetCreatorLock,
)
from .core.fixed import I64F64
from .ledger import Ledger
from .state import State

logger = logging.getLogger(__name__)


def _require_hotkey(state: State, hotkey: str) -> None:
    if not state.hotkey_exists(hotkey):
        raise HotKeyAccountNotExists(f"hotkey {hotkey!r} does not exist")


def _require_balance(ledger: Ledger, coldkey: str, amount: int) -> None:
    available = ledger.balance(coldkey)
    if available < amount:
        raise NotEnoughBalance(required=amount, available=available)


# ---------------------------------------------------------------------------
# Pool views
# ---------------------------------------------------------------------------

def get_tao_per_alpha_price(state: State, netuid: int) -> I64F64:
    """Pool price for dynamic subnets, 1.0 for static ones (including root)."""
    subnet = state.subnet(netuid)
    if subnet.is_dynamic:
        return subnet.pool.price()
    return I64F64.one()


def estimate_dynamic_unstake(state: State, netuid: int, alpha: int) -> int:
    """TAO returned for selling `alpha` on `netuid` right now."""
    subnet = state.subnet(netuid)
    if subnet.is_dynamic:
        return subnet.pool.estimate_unstake(alpha)
    return ensure_u64(alpha, "alpha")


# ---------------------------------------------------------------------------
# TAO stake
# ---------------------------------------------------------------------------

def add_stake(ledger: Ledger, coldkey: str, hotkey: str, amount: int, block: int) -> None:
    state = ledger.state
    ensure_u64(amount, "amount")
    _require_hotkey(state, hotkey)
    _require_balance(ledger, coldkey, amount)

    ledger.remove_balance(coldkey, amount)
    ledger.increase_stake(coldkey, hotkey, amount)
    state.mark_stake_increase(coldkey, hotkey, block)
    state.emit(StakeAdded(coldkey, hotkey, ROOT_NETUID, amount, amount))
    logger.debug("add_stake %s -> %s: %d at block %d", coldkey, hotkey, amount, block)


def remove_stake(ledger: Ledger, coldkey: str, hotkey: str, amount: int) -> None:
    state = ledger.state
    ensure_u64(amount, "amount")
    _require_hotkey(state, hotkey)
    current = ledger.stake(coldkey, hotkey)
    if current < amount:
        raise NotEnoughStakeToWithdraw(f"stake {current} of {coldkey!r} on {hotkey!r} below {amount}")

    ledger.decrease_stake(coldkey, hotkey, amount)
    ledger.add_balance(coldkey, amount)
    state.emit(StakeRemoved(coldkey, hotkey, ROOT_NETUID, amount, amount))
    logger.debug("remove_stake %s <- %s: %d", coldkey, hotkey, amount)


# ---------------------------------------------------------------------------
# Subnet stake
# ---------------------------------------------------------------------------

def add_subnet_stake(ledger: Ledger, coldkey: str, hotkey: str, netuid: int, tao: int, block: int) -> int:
    """Buy subnet alpha with `tao`; returns the alpha credited."""
    state = ledger.state
    ensure_u64(tao, "tao")
    if netuid == ROOT_NETUID:
        raise RegistrationNotPermittedOnRootSubnet("subnet stake is not valid on root")
    subnet = state.subnet(netuid)
    _require_hotkey(state, hotkey)
    _require_balance(ledger, coldkey, tao)

    ledger.remove_balance(coldkey, tao)
    if subnet.is_dynamic:
        alpha = subnet.pool.stake(tao)
    else:
        alpha = tao
    ledger.increase_total_subnet_tao(netuid, tao)
    ledger.increase_subnet_stake(coldkey, hotkey, netuid, alpha)
    state.mark_stake_increase(coldkey, hotkey, block)
    state.emit(StakeAdded(coldkey, hotkey, netuid, tao, alpha))
    logger.debug("add_subnet_stake netuid=%d %s -> %s: tao=%d alpha=%d", netuid, coldkey, hotkey, tao, alpha)
    return alpha


def remove_subnet_stake(ledger: Ledger, coldkey: str, hotkey: str, netuid: int, alpha: int, block: int) -> int:
    """Sell `alpha` back to the subnet; returns the TAO credited to the coldkey."""
    state = ledger.state
    ensure_u64(alpha, "alpha")
    if netuid == ROOT_NETUID:
        raise RegistrationNotPermittedOnRootSubnet("subnet stake is not valid on root")
    subnet = state.subnet(netuid)
    _require_hotkey(state, hotkey)
    if subnet.owner == coldkey and block - subnet.registered_at < state.config.subnet_owner_lock_period:
        raise SubnetCreatorLock(
            f"owner of netuid {netuid} locked until block {subnet.registered_at + state.config.subnet_owner_lock_period}"
        )
    current = ledger.subnet_stake(coldkey, hotkey, netuid)
    if current < alpha:
        raise NotEnoughStakeToWithdraw(f"alpha {current} of {coldkey!r} on {hotkey!r}/{netuid} below {alpha}")

    ledger.decrease_subnet_stake(coldkey, hotkey, netuid, alpha)
    if subnet.is_dynamic:
        tao = subnet.pool.unstake(alpha)
    else:
        tao = alpha
    ledger.decrease_total_subnet_tao(netuid, tao)
    ledger.add_balance(coldkey, tao)
    state.emit(StakeRemoved(coldkey, hotkey, netuid, alpha, tao))
    logger.debug("remove_subnet_stake netuid=%d %s <- %s: alpha=%d tao=%d", netuid, coldkey, hotkey, alpha, tao)
    return tao


__all__ = [
    "get_tao_per_alpha_price",
    "estimate_dynamic_unstake",
    "add_stake",
    "remove_stake",
    "add_subnet_stake",
    "remove_subnet_stake",
]
