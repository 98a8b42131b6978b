"""
Delegation graph: child/parent hotkey edges per subnet.

A hotkey declares up to MAX_CHILDREN children on a subnet, each with a
proportion expressed as a fraction of u64::MAX. The parent side of every
edge is stored on the child so that emission accumulation can find a
hotkey's parents without scanning the graph.

`do_set_children` validates in a fixed order and raises the first failing
check; nothing is written unless every check passes.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .core.amounts import checked_add
from .core.constants import MAX_CHILDREN, ROOT_NETUID, U64_MAX
from .core.datatypes import ChildrenSet
from .core.exc import (
    CircularChildRelation,
    DuplicateChild,
    InvalidChild,
    NonAssociatedColdKey,
    ProportionOverflow,
    RegistrationNotPermittedOnRootSubnet,
    SubNetworkDoesNotExist,
    TooManyChildren,
    TxRateLimitExceeded,
)
from .state import Edge, State

logger = logging.getLogger(__name__)

TX_SET_CHILDREN = "set_children"


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def passes_rate_limit(state: State, kind: str, hotkey: str, block: int, limit: int) -> bool:
    last = state.last_tx_block(kind, hotkey)
    if last is None:
        return True
    return block - last >= limit


def coldkey_owns_hotkey(state: State, coldkey: str, hotkey: str) -> bool:
    rec = state.get_hotkey(hotkey)
    return rec is not None and rec.owner == coldkey


def _find_cycle(state: State, hotkey: str, netuid: int,
                children: Sequence[Edge]) -> Optional[List[str]]:
    """Path from a new child back to `hotkey` through existing child edges, if any."""
    came_from: Dict[str, Optional[str]] = {}
    stack: List[str] = []
    for _, child in children:
        if child not in came_from:
            came_from[child] = None
            stack.append(child)
    while stack:
        node = stack.pop()
        if node == hotkey:
            path = [node]
            prev = came_from[node]
            while prev is not None:
                path.append(prev)
                prev = came_from[prev]
            path.reverse()
            return path
        for _, nxt in state.get_children(node, netuid):
            if nxt not in came_from:
                came_from[nxt] = node
                stack.append(nxt)
    return None


# ---------------------------------------------------------------------------
# Mutator
# ---------------------------------------------------------------------------

def do_set_children(
    state: State,
    coldkey: str,
    hotkey: str,
    netuid: int,
    children: Sequence[Tuple[int, str]],
    block: int,
) -> None:
    """Replace `hotkey`'s children on `netuid` with `children` (stored verbatim)."""
    children = [(p, c) for p, c in children]
    logger.debug("do_set_children coldkey=%s hotkey=%s netuid=%d children=%s", coldkey, hotkey, netuid, children)

    # --- 1. rate limit
    if not passes_rate_limit(state, TX_SET_CHILDREN, hotkey, block, state.config.set_children_rate_limit):
        raise TxRateLimitExceeded(f"set_children for {hotkey!r} rate limited at block {block}")

    # --- 2. not on root
    if netuid == ROOT_NETUID:
        raise RegistrationNotPermittedOnRootSubnet("children are not valid on the root network")

    # --- 3. subnet exists
    if not state.subnet_exists(netuid):
        raise SubNetworkDoesNotExist(f"netuid {netuid} does not exist")

    # --- 4. ownership
    if not coldkey_owns_hotkey(state, coldkey, hotkey):
        raise NonAssociatedColdKey(f"{coldkey!r} does not own {hotkey!r}")

    # --- 5. count
    if len(children) > MAX_CHILDREN:
        raise TooManyChildren(f"{len(children)} children exceeds {MAX_CHILDREN}")

    # --- 6. proportions fit u64 and their sum does not overflow
    total = 0
    for proportion, _ in children:
        if isinstance(proportion, bool) or not isinstance(proportion, int) or not 0 <= proportion <= U64_MAX:
            raise ProportionOverflow(f"proportion {proportion!r} outside u64")
        total = checked_add(total, proportion)
        if total is None:
            raise ProportionOverflow("sum of proportions overflows u64")

    # --- 7. no self edge
    for _, child in children:
        if child == hotkey:
            raise InvalidChild(f"{hotkey!r} cannot be its own child")

    # --- 8. no duplicates
    seen = set()
    for _, child in children:
        if child in seen:
            raise DuplicateChild(f"{child!r} listed twice")
        seen.add(child)

    # --- 9. no cycles
    path = _find_cycle(state, hotkey, netuid, children)
    if path is not None:
        raise CircularChildRelation(hotkey, netuid, path)

    # --- 10. drop me from every old child's parents
    for _, old_child in state.get_children(hotkey, netuid):
        parents = [(p, h) for p, h in state.get_parents(old_child, netuid) if h != hotkey]
        state.set_parents(old_child, netuid, parents)

    # --- 11. store new children, append me to each new child's parents
    state.set_children(hotkey, netuid, children)
    for proportion, child in children:
        parents = state.get_parents(child, netuid)
        parents.append((proportion, hotkey))
        state.set_parents(child, netuid, parents)

    state.set_last_tx_block(TX_SET_CHILDREN, hotkey, block)
    state.emit(ChildrenSet(hotkey=hotkey, netuid=netuid, children=tuple(children), block=block))
    logger.info("children set: hotkey=%s netuid=%d count=%d", hotkey, netuid, len(children))


def get_children(state: State, hotkey: str, netuid: int) -> List[Edge]:
    return state.get_children(hotkey, netuid)


def get_parents(state: State, child: str, netuid: int) -> List[Edge]:
    return state.get_parents(child, netuid)


__all__ = [
    "TX_SET_CHILDREN",
    "passes_rate_limit",
    "coldkey_owns_hotkey",
    "do_set_children",
    "get_children",
    "get_parents",
]
