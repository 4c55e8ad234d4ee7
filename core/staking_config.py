"""
Configuration for the staking reward ledger.

Holds the fixed-point constants shared by the pool accumulator, the user
ledger and the settlement engine, together with the operator-tunable
defaults used when a staking pool is created.
"""

from dataclasses import dataclass

# Fixed-point scaling
BASIS_POINTS_FULL = 10_000  # 100% expressed in basis points
SECONDS_PER_DAY = 24 * 60 * 60
SECONDS_PER_YEAR = 365 * SECONDS_PER_DAY  # 31,536,000
REWARD_SCALE = BASIS_POINTS_FULL * SECONDS_PER_YEAR  # acc_index * amount -> asset units

# Early-withdrawal fee parameters
FEE_BASE = 10_000
DEFAULT_EARLY_WITHDRAW_FEE = 1_000  # 10%
MAX_EARLY_WITHDRAW_FEE = 2_000  # 20%

# Pool parameters
MAX_LOCK_DAYS = 365

# Addressing and arithmetic bounds
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
UINT256_MAX = 2**256 - 1

DEFAULT_LEDGER_ADDRESS = "staking_pool"


@dataclass(frozen=True)
class StakingSettings:
    """Operator defaults applied when a StakingPool is constructed."""

    early_withdraw_fee: int = DEFAULT_EARLY_WITHDRAW_FEE
    max_early_withdraw_fee: int = MAX_EARLY_WITHDRAW_FEE
    max_lock_days: int = MAX_LOCK_DAYS
    ledger_address: str = DEFAULT_LEDGER_ADDRESS


DEFAULT_SETTINGS = StakingSettings()


def is_zero_address(address) -> bool:
    """True for the zero address or an empty identity."""
    return not address or address == ZERO_ADDRESS
