"""
Pool accumulator for the staking ledger.

Each pool carries an accrual index: the running sum of APR (basis points)
multiplied by elapsed seconds since the pool was created. Dividing
`acc_index * amount` by REWARD_SCALE turns it back into asset units, so a
position's reward never requires replaying history.
"""

from dataclasses import dataclass

from staking_config import UINT256_MAX


@dataclass
class PoolInfo:
    """Configuration and accrual state of one staking pool."""
    apr: int                 # Annual rate in basis points, 0 disables deposits
    lock_period: int         # Seconds a deposit must age to avoid the early fee
    acc_index: int = 0       # Cumulative apr * seconds
    last_update: int = 0     # Timestamp of the last refresh
    total_deposit: int = 0   # Sum of all positions' amounts

    @property
    def is_active(self) -> bool:
        return self.apr > 0


def checked(value: int) -> int:
    """Raises OverflowError when a value leaves the unsigned 256-bit range."""
    if value < 0 or value > UINT256_MAX:
        raise OverflowError(f"Value {value} outside uint256 range")
    return value


def projected_acc_index(pool: PoolInfo, now: int) -> int:
    """
    Returns the accrual index a refresh at `now` would produce.

    Does not mutate the pool; read-only views use this.
    """
    if now > pool.last_update and pool.apr > 0:
        return checked(pool.acc_index + (now - pool.last_update) * pool.apr)
    return pool.acc_index


def refresh_pool(pool: PoolInfo, now: int) -> int:
    """
    Brings a pool's accrual index up to `now`.

    The timestamp moves forward even while the APR is zero, so a window spent
    disabled is never credited once the pool is re-enabled. Calling twice at
    the same instant changes nothing.

    Args:
        pool: Pool to refresh
        now: Current instant in seconds

    Returns:
        The refreshed accrual index
    """
    if now < pool.last_update:
        raise ValueError(f"Clock went backwards: {now} < {pool.last_update}")

    pool.acc_index = projected_acc_index(pool, now)
    pool.last_update = now
    return pool.acc_index
