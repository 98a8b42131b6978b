"""
Stake ledger view over the owned `State`.

This is the collaborator the emission and drain steps talk to. It exposes
exactly the stake/issuance operations the block transition needs, plus the
balance and subnet-stake bookkeeping used by staking and registration.

Integer domain only: every credit saturates at u64::MAX; debits that would go
below zero raise a dispatch error and leave state untouched.
"""

from __future__ import annotations

from .core.amounts import saturating_add, saturating_sub, ensure_u64
from .core.constants import U64_MAX
from .core.exc import NotEnoughBalance, NotEnoughStakeToWithdraw
from .core.fixed import I96F32
from .state import State


def _edge_share(stake: int, proportion: int) -> int:
    """floor(stake * proportion / u64::MAX) in I96F32."""
    p = I96F32.from_num(proportion).saturating_div(I96F32.from_num(U64_MAX))
    return I96F32.from_num(stake).saturating_mul(p).to_u64()


class Ledger:
    def __init__(self, state: State):
        self.state = state

    # ------------------------------------------------------------------
    # TAO stake (per nominator)
    # ------------------------------------------------------------------

    def stake(self, coldkey: str, hotkey: str) -> int:
        return self.state.get_stake(coldkey, hotkey)

    def increase_stake(self, coldkey: str, hotkey: str, amount: int) -> None:
        """Credit `amount` to the (coldkey, hotkey) stake."""
        cur = self.state.get_stake(coldkey, hotkey)
        self.state.set_stake(coldkey, hotkey, saturating_add(cur, amount))

    def decrease_stake(self, coldkey: str, hotkey: str, amount: int) -> None:
        cur = self.state.get_stake(coldkey, hotkey)
        if cur < amount:
            raise NotEnoughStakeToWithdraw(
                f"stake {cur} of {coldkey!r} on {hotkey!r} below {amount}"
            )
        self.state.set_stake(coldkey, hotkey, cur - amount)

    def increase_stake_on_hotkey(self, hotkey: str, amount: int) -> None:
        """Credit the hotkey's owning coldkey (the hotkey itself when unowned)."""
        rec = self.state.get_hotkey(hotkey)
        owner = rec.owner if rec is not None and rec.owner is not None else hotkey
        self.increase_stake(owner, hotkey, amount)

    def total_stake_for_hotkey(self, hotkey: str) -> int:
        total = 0
        for _, rec in self.state.nominators(hotkey):
            total = saturating_add(total, rec.amount)
        return total

    def total_stake(self) -> int:
        total = 0
        for hk in self.state.stake_hotkeys():
            total = saturating_add(total, self.total_stake_for_hotkey(hk))
        return total

    def stake_with_children_and_parents(self, hotkey: str, netuid: int) -> int:
        """Own stake, minus what is delegated to children, plus what parents delegate in.

        Each edge term is floor(stake * proportion / u64::MAX) computed in
        I96F32; sums saturate.
        """
        own = self.total_stake_for_hotkey(hotkey)
        to_children = 0
        for proportion, _child in self.state.get_children(hotkey, netuid):
            to_children = saturating_add(to_children, _edge_share(own, proportion))
        from_parents = 0
        for proportion, parent in self.state.get_parents(hotkey, netuid):
            parent_stake = self.total_stake_for_hotkey(parent)
            from_parents = saturating_add(from_parents, _edge_share(parent_stake, proportion))
        return saturating_add(saturating_sub(own, to_children), from_parents)

    # ------------------------------------------------------------------
    # Issuance
    # ------------------------------------------------------------------

    @property
    def total_issuance(self) -> int:
        return self.state.total_issuance

    def increase_total_issuance(self, amount: int) -> None:
        self.state.total_issuance = saturating_add(self.state.total_issuance, amount)

    # ------------------------------------------------------------------
    # Free balance
    # ------------------------------------------------------------------

    def balance(self, coldkey: str) -> int:
        return self.state.get_balance(coldkey)

    def add_balance(self, coldkey: str, amount: int) -> None:
        ensure_u64(amount, "amount")
        self.state.set_balance(coldkey, saturating_add(self.state.get_balance(coldkey), amount))

    def remove_balance(self, coldkey: str, amount: int) -> None:
        ensure_u64(amount, "amount")
        cur = self.state.get_balance(coldkey)
        if cur < amount:
            raise NotEnoughBalance(required=amount, available=cur)
        self.state.set_balance(coldkey, cur - amount)

    # ------------------------------------------------------------------
    # Subnet (alpha) stake and subnet TAO
    # ------------------------------------------------------------------

    def subnet_stake(self, coldkey: str, hotkey: str, netuid: int) -> int:
        return self.state.get_subnet_stake(coldkey, hotkey, netuid)

    def increase_subnet_stake(self, coldkey: str, hotkey: str, netuid: int, amount: int) -> None:
        cur = self.state.get_subnet_stake(coldkey, hotkey, netuid)
        self.state.set_subnet_stake(coldkey, hotkey, netuid, saturating_add(cur, amount))

    def decrease_subnet_stake(self, coldkey: str, hotkey: str, netuid: int, amount: int) -> None:
        cur = self.state.get_subnet_stake(coldkey, hotkey, netuid)
        if cur < amount:
            raise NotEnoughStakeToWithdraw(
                f"alpha {cur} of {coldkey!r} on {hotkey!r}/{netuid} below {amount}"
            )
        self.state.set_subnet_stake(coldkey, hotkey, netuid, cur - amount)

    def total_subnet_tao(self, netuid: int) -> int:
        return self.state.subnet(netuid).total_subnet_tao

    def increase_total_subnet_tao(self, netuid: int, amount: int) -> None:
        s = self.state.subnet(netuid)
        s.total_subnet_tao = saturating_add(s.total_subnet_tao, amount)

    def decrease_total_subnet_tao(self, netuid: int, amount: int) -> None:
        s = self.state.subnet(netuid)
        s.total_subnet_tao = saturating_sub(s.total_subnet_tao, amount)


__all__ = ["Ledger"]
