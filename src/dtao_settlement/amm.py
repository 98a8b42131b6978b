"""
Dynamic subnet pool (constant product, no fee): **pool math only**.

A dynamic subnet holds a TAO reserve and an alpha reserve. Staking swaps TAO
in for alpha out, unstaking swaps alpha in for TAO out. The invariant
`k = tao_reserve * alpha_reserve` is an exact integer and is *not* updated by
swaps; it is only recomputed when emission is injected into the pool.

Rounding always favours the pool: the reserve on the output side is floored
(`k // new_input_reserve`) and never allowed to grow on a swap.
"""
from __future__ import annotations

from typing import Tuple

from .core.amounts import ensure_u64
from .core.fixed import I64F64

# --- Debug utilities (toggleable) ---
DEBUG_AMM = False

def _dbg(msg: str) -> None:
    if DEBUG_AMM:
        print(f"[AMM] {msg}")


class DynamicPool:
    """TAO/alpha reserves of one dynamic subnet."""

    def __init__(self, tao_reserve: int, alpha_reserve: int):
        self.tao_reserve = ensure_u64(tao_reserve, "tao_reserve")
        self.alpha_reserve = ensure_u64(alpha_reserve, "alpha_reserve")
        self.k = self.tao_reserve * self.alpha_reserve

    def __repr__(self) -> str:
        return f"DynamicPool(tao={self.tao_reserve}, alpha={self.alpha_reserve}, k={self.k})"

    # --- Views ---

    def price(self) -> I64F64:
        """TAO per alpha as I64F64; zero when the alpha reserve is empty."""
        if self.alpha_reserve == 0:
            return I64F64.zero()
        return I64F64.from_ratio(self.tao_reserve, self.alpha_reserve)

    def snapshot(self) -> Tuple[int, int, int]:
        return self.tao_reserve, self.alpha_reserve, self.k

    # --- Swap math (no mutation) ---

    def _after_stake(self, tao_in: int) -> Tuple[int, int]:
        new_tao = self.tao_reserve + tao_in
        if new_tao == 0:
            return new_tao, self.alpha_reserve
        new_alpha = min(self.alpha_reserve, self.k // new_tao)
        return new_tao, new_alpha

    def _after_unstake(self, alpha_in: int) -> Tuple[int, int]:
        new_alpha = self.alpha_reserve + alpha_in
        if new_alpha == 0:
            return self.tao_reserve, new_alpha
        new_tao = min(self.tao_reserve, self.k // new_alpha)
        return new_tao, new_alpha

    def estimate_stake(self, tao_in: int) -> int:
        """Alpha that `tao_in` would buy right now."""
        ensure_u64(tao_in, "tao_in")
        _, new_alpha = self._after_stake(tao_in)
        return self.alpha_reserve - new_alpha

    def estimate_unstake(self, alpha_in: int) -> int:
        """TAO that selling `alpha_in` would return right now."""
        ensure_u64(alpha_in, "alpha_in")
        new_tao, _ = self._after_unstake(alpha_in)
        return self.tao_reserve - new_tao

    # --- Swaps (mutating) ---

    def stake(self, tao_in: int) -> int:
        """Swap TAO in for alpha out; returns alpha out. `k` is left unchanged."""
        ensure_u64(tao_in, "tao_in")
        new_tao, new_alpha = self._after_stake(tao_in)
        alpha_out = self.alpha_reserve - new_alpha
        _dbg(f"stake tao_in={tao_in} alpha_out={alpha_out} reserves {self.tao_reserve}/{self.alpha_reserve} -> {new_tao}/{new_alpha}")
        self.tao_reserve, self.alpha_reserve = new_tao, new_alpha
        return alpha_out

    def unstake(self, alpha_in: int) -> int:
        """Swap alpha in for TAO out; returns TAO out. `k` is left unchanged."""
        ensure_u64(alpha_in, "alpha_in")
        new_tao, new_alpha = self._after_unstake(alpha_in)
        tao_out = self.tao_reserve - new_tao
        _dbg(f"unstake alpha_in={alpha_in} tao_out={tao_out} reserves {self.tao_reserve}/{self.alpha_reserve} -> {new_tao}/{new_alpha}")
        self.tao_reserve, self.alpha_reserve = new_tao, new_alpha
        return tao_out

    # --- Emission injection ---

    def inject_tao(self, amount: int) -> None:
        """Add emitted TAO to the reserve and recompute `k`."""
        ensure_u64(amount, "amount")
        self.tao_reserve += amount
        self.k = self.tao_reserve * self.alpha_reserve
        _dbg(f"inject_tao {amount} -> {self!r}")

    def inject_alpha(self, amount: int) -> None:
        """Add emitted alpha to the reserve and recompute `k`."""
        ensure_u64(amount, "amount")
        self.alpha_reserve += amount
        self.k = self.tao_reserve * self.alpha_reserve
        _dbg(f"inject_alpha {amount} -> {self!r}")


__all__ = ["DynamicPool"]
