"""
Guard predicates consulted before any ledger mutation.

Guards never modify state. Each one either returns quietly or raises the
typed error for the violated precondition.
"""

from __future__ import annotations

from typing import Any

from artledger.core.constants import BURN_ADDRESS, UINT128_MAX
from artledger.core.ledger_exceptions import (
    InvalidAmountError,
    NotAuthorizedError,
    PausedError,
    ZeroAddressError,
)
from artledger.core.ledger_state import LedgerState


def require_admin(state: LedgerState, caller: str) -> None:
    """Require caller is the administrator."""
    if caller != state.admin:
        raise NotAuthorizedError(
            "caller is not the administrator",
            details={"caller": caller},
        )


def require_not_paused(state: LedgerState) -> None:
    """Require the ledger is not paused."""
    if state.paused:
        raise PausedError("ledger is paused")


def require_valid_address(address: str, field: str = "address") -> None:
    """Require address is set and is not the burn sentinel."""
    if not address or address == BURN_ADDRESS:
        raise ZeroAddressError(
            f"{field} is the null address",
            details={"field": field, "address": address},
        )


def require_uint(amount: Any, field: str = "amount") -> None:
    """Require amount is an unsigned 128-bit integer."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(
            f"{field} must be an integer",
            details={"field": field, "type": type(amount).__name__},
        )
    if amount < 0 or amount > UINT128_MAX:
        raise InvalidAmountError(
            f"{field} is outside the unsigned range",
            details={"field": field, "amount": amount},
        )


def require_amount_positive(amount: Any, field: str = "amount") -> None:
    """Require amount is a strictly positive unsigned integer."""
    require_uint(amount, field)
    if amount <= 0:
        raise InvalidAmountError(
            f"{field} must be positive",
            details={"field": field, "amount": amount},
        )
