"""
Errors raised by the staking reward ledger.

Every StakingError is a rejected call: the ledger is left exactly as it was
before the call started. RewardDebtUnderflow and LedgerInvariantError signal
accounting defects rather than bad input.
"""


class StakingError(ValueError):
    """Base class for rejected staking calls."""


class InvalidPoolId(StakingError):
    """Pool id is unknown, or the pool is disabled for deposits."""


class InsufficientDepositAmount(StakingError):
    """Deposit of a zero or negative amount."""


class InvalidAmount(StakingError):
    """Zero or negative amount where a positive one is required."""


class InvalidPoolApr(StakingError):
    """Pool APR is zero on creation, or negative."""


class InvalidWithdrawLockPeriod(StakingError):
    """Lock period is negative or exceeds the maximum number of days."""


class InvalidEarlyWithdrawFee(StakingError):
    """Early-withdrawal fee is negative or above the configured ceiling."""


class InvalidSettings(StakingError):
    """Invalid destination address, or nothing left to recover."""


class InvalidTransferFrom(StakingError):
    """The token refused to pull funds into the ledger."""


class InvalidTransfer(StakingError):
    """The token refused to send funds out of the ledger."""


class Unauthorized(StakingError):
    """An admin operation was called by someone other than the owner."""


class RewardDebtUnderflow(ArithmeticError):
    """Reward debt exceeds the accrued total for a position."""


class LedgerInvariantError(AssertionError):
    """A ledger-wide invariant no longer holds."""
