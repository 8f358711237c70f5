"""
Ledger exception hierarchy for artledger.

Every failed ledger call raises one of these typed exceptions. Each class
carries the numeric code that is reported to callers through
:class:`artledger.core.response.Response`, so the taxonomy doubles as the
external error interface.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Type

from artledger.core.constants import ErrorCode


class LedgerError(Exception):
    """Base exception for all ledger call failures.

    No ledger error is transient: each one is caused by a violated
    precondition that the caller has to correct.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        code: Numeric error code reported to the caller
    """

    code: ErrorCode = ErrorCode.INVALID_AMOUNT

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": int(self.code),
            "type": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


# ==================== Authorization Errors ====================


class NotAuthorizedError(LedgerError):
    """Raised when a privileged operation is called by someone other than the administrator."""

    code = ErrorCode.NOT_AUTHORIZED


class PausedError(LedgerError):
    """Raised when a pause-gated operation is called while the ledger is paused."""

    code = ErrorCode.PAUSED


# ==================== Balance Errors ====================


class InsufficientBalanceError(LedgerError):
    """Raised when an account's spendable balance cannot cover a debit."""

    code = ErrorCode.INSUFFICIENT_BALANCE


class InsufficientStakeError(LedgerError):
    """Raised when an account's staked balance cannot cover an unstake."""

    code = ErrorCode.INSUFFICIENT_STAKE


class AllowanceInsufficientError(LedgerError):
    """Raised when an allowance cannot cover a delegated transfer or decrease."""

    code = ErrorCode.ALLOWANCE_INSUFFICIENT


class MaxSupplyReachedError(LedgerError):
    """Raised when a mint would push total supply past the cap."""

    code = ErrorCode.MAX_SUPPLY_REACHED


# ==================== Argument Errors ====================


class ZeroAddressError(LedgerError):
    """Raised when a target address is the burn/null sentinel."""

    code = ErrorCode.ZERO_ADDRESS


class InvalidAmountError(LedgerError):
    """Raised when an amount is not positive or is outside the unsigned range."""

    code = ErrorCode.INVALID_AMOUNT


class BatchTooLargeError(InvalidAmountError):
    """Raised when a batch mint holds more entries than allowed."""


class InvalidReleaseHeightError(InvalidAmountError):
    """Raised when a vesting release height is not in the future."""


# ==================== Vesting Errors ====================


class VestingNotFoundError(InvalidAmountError):
    """Raised when no vesting claim exists at the requested key."""


class VestingLockedError(LedgerError):
    """Raised when a vesting claim is redeemed before its release height."""

    code = ErrorCode.VESTING_LOCKED


class AlreadyVestedError(LedgerError):
    """Raised when a vesting claim already exists for a beneficiary and height."""

    code = ErrorCode.ALREADY_VESTED


_ERRORS_BY_CODE: Dict[int, Type[LedgerError]] = {
    int(ErrorCode.NOT_AUTHORIZED): NotAuthorizedError,
    int(ErrorCode.INSUFFICIENT_BALANCE): InsufficientBalanceError,
    int(ErrorCode.INSUFFICIENT_STAKE): InsufficientStakeError,
    int(ErrorCode.MAX_SUPPLY_REACHED): MaxSupplyReachedError,
    int(ErrorCode.PAUSED): PausedError,
    int(ErrorCode.ZERO_ADDRESS): ZeroAddressError,
    int(ErrorCode.INVALID_AMOUNT): InvalidAmountError,
    int(ErrorCode.ALLOWANCE_INSUFFICIENT): AllowanceInsufficientError,
    int(ErrorCode.VESTING_LOCKED): VestingLockedError,
    int(ErrorCode.ALREADY_VESTED): AlreadyVestedError,
}


def error_for_code(code: int) -> Type[LedgerError]:
    """Return the base exception class for a numeric error code.

    Raises:
        KeyError: If the code is not part of the taxonomy
    """
    return _ERRORS_BY_CODE[int(code)]
