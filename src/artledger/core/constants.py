"""
artledger Constants

Fixed parameters of the token ledger and the numeric error taxonomy.

NOTE: The error codes are part of the external interface. Callers match on
them, so existing values must never be renumbered.
"""

from enum import IntEnum
from typing import Final

# =============================================================================
# SUPPLY
# =============================================================================

MAX_SUPPLY: Final[int] = 100_000_000_000_000
TOKEN_DECIMALS: Final[int] = 6
MAX_DECIMALS: Final[int] = 18

# Amount arguments are unsigned 128-bit integers on the host
UINT128_MAX: Final[int] = 2**128 - 1

# =============================================================================
# METADATA DEFAULTS
# =============================================================================

DEFAULT_TOKEN_NAME: Final[str] = "Artist Token"
DEFAULT_TOKEN_SYMBOL: Final[str] = "ART"

# =============================================================================
# ADDRESSES
# =============================================================================

# Null/burn principal; never a valid recipient, spender or administrator
BURN_ADDRESS: Final[str] = "SP000000000000000000002Q6VF78"

# =============================================================================
# LIMITS
# =============================================================================

MAX_BATCH_SIZE: Final[int] = 50

# =============================================================================
# ERROR CODES
# =============================================================================


class ErrorCode(IntEnum):
    NOT_AUTHORIZED = 100
    INSUFFICIENT_BALANCE = 101
    INSUFFICIENT_STAKE = 102
    MAX_SUPPLY_REACHED = 103
    PAUSED = 104
    ZERO_ADDRESS = 105
    INVALID_AMOUNT = 106
    ALLOWANCE_INSUFFICIENT = 107
    VESTING_LOCKED = 108
    ALREADY_VESTED = 111
