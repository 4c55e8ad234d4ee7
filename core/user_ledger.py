"""
Per-user ledger for the staking pool.

A position's reward debt records how much of `acc_index * amount` has
already been settled. Whatever the index has grown by since then, times the
position size, is the pending reward.
"""

from dataclasses import dataclass

from pool_accumulator import checked
from staking_config import REWARD_SCALE
from staking_errors import RewardDebtUnderflow


@dataclass
class UserInfo:
    """Represents a user's position in one pool."""
    amount: int = 0            # Currently staked amount
    reward_debt: int = 0       # acc_index * amount at the last settlement, unscaled
    reward_locked_up: int = 0  # Reward owed but deferred until the lock boundary
    last_interaction: int = 0  # Timestamp of the last settlement
    last_deposit: int = 0      # Timestamp of the last deposit

    @property
    def is_active(self) -> bool:
        return self.amount > 0


def accrued(acc_index: int, amount: int) -> int:
    """Total accrual owed to `amount` at `acc_index`, in unscaled units."""
    return checked(acc_index * amount)


def pending_reward(acc_index: int, user: UserInfo) -> int:
    """
    Calculates the reward a position has earned since its last settlement.

    `acc_index` must already be refreshed for the current instant.

    Args:
        acc_index: The pool's accrual index
        user: The position

    Returns:
        Pending reward in asset units, rounded down
    """
    if user.amount == 0:
        return 0

    owed = accrued(acc_index, user.amount)
    if owed < user.reward_debt:
        raise RewardDebtUnderflow(
            f"Reward debt {user.reward_debt} exceeds accrued {owed}; position was resized without settling"
        )
    return (owed - user.reward_debt) // REWARD_SCALE


def sync_reward_debt(user: UserInfo, acc_index: int) -> None:
    """Marks everything accrued at `acc_index` for the current amount as settled."""
    user.reward_debt = accrued(acc_index, user.amount)


def close_position(user: UserInfo) -> int:
    """
    Zeroes a position's size and bookkeeping.

    Returns:
        The amount that was staked
    """
    amount = user.amount
    user.amount = 0
    user.reward_debt = 0
    user.reward_locked_up = 0
    return amount
