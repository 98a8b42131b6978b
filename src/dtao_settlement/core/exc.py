"""
Core exception types for dtao_settlement.

These are dependency-free and may be imported by all modules.

Two families:
- domain errors (`AmountDomainError`, `InvariantViolation`) guard the integer
  domain and the ledger/reserve invariants;
- dispatch errors (`DispatchError` subclasses) are validation failures raised
  synchronously to a caller at a mutation boundary. A dispatch error always
  leaves state untouched.
"""

__all__ = [
    "AmountDomainError",
    "InvariantViolation",
    "RootEpochError",
    "DispatchError",
    "TxRateLimitExceeded",
    "RegistrationNotPermittedOnRootSubnet",
    "SubNetworkDoesNotExist",
    "NonAssociatedColdKey",
    "TooManyChildren",
    "ProportionOverflow",
    "InvalidChild",
    "DuplicateChild",
    "CircularChildRelation",
    "HotKeyAccountNotExists",
    "NotEnoughBalance",
    "NotEnoughStakeToWithdraw",
    "SubnetCreatorLock",
    "NotAllowedToDissolve",
    "EmissionValuesError",
]


class AmountDomainError(Exception):
    """Raised when inputs violate the non-negative integer domain or basic preconditions."""
    pass


class InvariantViolation(Exception):
    """Raised when arithmetic or bookkeeping would break a core invariant."""
    pass


class RootEpochError(Exception):
    """Raised by a root allocator that cannot compute this block's emission.

    This is the only recoverable failure inside the block transition: the
    coinbase logs it and skips the allocator step for that block.
    """
    pass


class DispatchError(Exception):
    """Base class for caller-facing validation failures."""
    pass


class TxRateLimitExceeded(DispatchError):
    """The hotkey used this transaction type too recently."""
    pass


class RegistrationNotPermittedOnRootSubnet(DispatchError):
    """Operation is not valid on the root network."""
    pass


class SubNetworkDoesNotExist(DispatchError):
    """The netuid does not name a registered subnet."""
    pass


class NonAssociatedColdKey(DispatchError):
    """The calling coldkey does not own the hotkey (or subnet)."""
    pass


class TooManyChildren(DispatchError):
    """More than MAX_CHILDREN children were declared."""
    pass


class ProportionOverflow(DispatchError):
    """A child proportion is outside u64 or the proportions overflow u64 when summed."""
    pass


class InvalidChild(DispatchError):
    """A hotkey cannot be its own child."""
    pass


class DuplicateChild(DispatchError):
    """The same child appears twice in one declaration."""
    pass


class CircularChildRelation(DispatchError):
    """The declaration would close a cycle in the subnet's delegation graph.

    Attributes
    ----------
    path : list
        Hotkeys walked from the offending child back to the declaring hotkey.
    """

    def __init__(self, hotkey, netuid, path):
        super().__init__(
            f"children of {hotkey!r} on netuid {netuid} would close a cycle: {path!r}"
        )
        self.hotkey = hotkey
        self.netuid = netuid
        self.path = path


class HotKeyAccountNotExists(DispatchError):
    """The hotkey has never been registered or staked to."""
    pass


class NotEnoughBalance(DispatchError):
    """Free balance does not cover the requested amount.

    Attributes
    ----------
    required : int
        Amount that had to be paid.
    available : int
        Free balance of the coldkey at the time of the call.
    """

    def __init__(self, required, available):
        super().__init__(f"balance {available} insufficient for required {required}")
        self.required = required
        self.available = available


class NotEnoughStakeToWithdraw(DispatchError):
    """Stake on the (coldkey, hotkey[, netuid]) pair is below the requested amount."""
    pass


class SubnetCreatorLock(DispatchError):
    """Subnet owners cannot unstake subnet alpha during the owner lock period."""
    pass


class NotAllowedToDissolve(DispatchError):
    """The subnet cannot be dissolved (root or dynamic subnet)."""
    pass


class EmissionValuesError(DispatchError):
    """Emission values do not match the registered subnets or exceed block emission."""
    pass
