"""
dTAO Settlement Core
====================

Unified exports for the integer-domain primitives used by the block
transition: u64 saturating helpers, binary fixed-point types, shared
datatypes and exceptions. Decimal functions exist only for I/O formatting.
"""

# NOTE:
#   Every state transition is computed on ints and FixedPoint values. A run
#   replays bit-identically given the same inputs; Decimal never feeds back
#   into state.

# Integer widths and chain defaults
from .constants import (
    U16_MAX,
    U64_MAX,
    RAO_PER_TAO,
    ROOT_NETUID,
    MAX_CHILDREN,
    RAO_QUANTUM,
)

# Decimal formatting helpers (non-core arithmetic)
from .fmt import (
    DEFAULT_DECIMAL_PRECISION,
    fmt_fixed,
    fmt_tao,
)

# Saturating integer helpers and TAO bridges
from .amounts import (
    saturating_add,
    saturating_sub,
    saturating_mul,
    checked_add,
    ensure_u64,
    tao_from_rao,
    rao_from_tao_in,
)

# Binary fixed point
from .fixed import (
    FixedPoint,
    I64F64,
    U64F64,
    I96F32,
)

# Shared datatypes
from .datatypes import (
    Denomination,
    HotkeyEmission,
    ChildrenSet,
    NetworkAdded,
    NetworkRemoved,
    StakeAdded,
    StakeRemoved,
    BlockReport,
)

# Core exceptions
from .exc import (
    AmountDomainError,
    InvariantViolation,
    RootEpochError,
    DispatchError,
    TxRateLimitExceeded,
    RegistrationNotPermittedOnRootSubnet,
    SubNetworkDoesNotExist,
    NonAssociatedColdKey,
    TooManyChildren,
    ProportionOverflow,
    InvalidChild,
    DuplicateChild,
    CircularChildRelation,
    HotKeyAccountNotExists,
    NotEnoughBalance,
    NotEnoughStakeToWithdraw,
    SubnetCreatorLock,
    NotAllowedToDissolve,
    EmissionValuesError,
)

__all__ = [
    # constants
    "U16_MAX",
    "U64_MAX",
    "RAO_PER_TAO",
    "ROOT_NETUID",
    "MAX_CHILDREN",
    "RAO_QUANTUM",
    # fmt
    "DEFAULT_DECIMAL_PRECISION",
    "fmt_fixed",
    "fmt_tao",
    # amounts
    "saturating_add",
    "saturating_sub",
    "saturating_mul",
    "checked_add",
    "ensure_u64",
    "tao_from_rao",
    "rao_from_tao_in",
    # fixed point
    "FixedPoint",
    "I64F64",
    "U64F64",
    "I96F32",
    # datatypes
    "Denomination",
    "HotkeyEmission",
    "ChildrenSet",
    "NetworkAdded",
    "NetworkRemoved",
    "StakeAdded",
    "StakeRemoved",
    "BlockReport",
    # exceptions
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
