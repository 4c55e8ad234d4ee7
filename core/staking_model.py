"""
Economic Model for the staking reward ledger.

This module wires a clock, a reward token and a staking pool together so the
ledger can be driven through simulated scenarios: operator funding, users
staking, harvesting and withdrawing over many days, with the reserve, the
staked principal and the estimated reserve runway recorded along the way.
"""

import logging

import matplotlib.pyplot as plt
import numpy as np

from clock import ManualClock
from reward_token import RewardToken
from staking_config import DEFAULT_SETTINGS, SECONDS_PER_DAY
from staking_pool import StakingPool

logger = logging.getLogger(__name__)

TOKEN_UNIT = 10**18


class StakingEconomicModel:
    """
    Complete economic model of a staking pool.
    Combines all components and provides simulation capabilities.
    """

    def __init__(self, operator="operator", marketing_address="marketing", start_time=0,
                 settings=DEFAULT_SETTINGS):
        self.operator = operator
        self.clock = ManualClock(start_time)
        self.token = RewardToken()
        self.staking_pool = StakingPool(
            self.token,
            self.clock,
            owner=operator,
            marketing_address=marketing_address,
            settings=settings,
        )

        # Total reward ever added to the reserve
        self.total_funded = 0

        # History tracking for simulations
        self.time_history = []
        self.reserve_history = []
        self.total_staked_history = []
        self.time_to_empty_history = []
        self.rewards_paid_history = []
        self._update_history()

    @property
    def rewards_paid(self):
        """Reward paid out to depositors so far, excluding recovered reserve."""
        return self.staking_pool.rewards_distributed

    def add_pool(self, apr, lock_days):
        return self.staking_pool.add_pool(self.operator, apr, lock_days)

    def fund_reserve(self, amount):
        """Mints `amount` to the operator and adds it to the reward reserve."""
        amount = int(amount)
        self.token.mint(self.operator, amount)
        self.token.approve(self.operator, self.staking_pool.address, amount)
        self.staking_pool.add_reward_tokens(self.operator, amount)
        self.total_funded += amount
        self._update_history()

    def recover_reserve(self, to):
        """Sends the whole reward reserve to `to` on behalf of the operator."""
        recovered = self.staking_pool.recover_treasure(self.operator, to)
        self._update_history()
        return recovered

    def stake(self, user, pid, amount):
        """
        Stakes on behalf of `user`, minting whatever they are short.

        Args:
            user: Address of the depositor
            pid: Pool id
            amount: Amount to stake in token units
        """
        amount = int(amount)
        shortfall = amount - self.token.balance_of(user)
        if shortfall > 0:
            self.token.mint(user, shortfall)
        self.token.approve(user, self.staking_pool.address, amount)
        self.staking_pool.deposit(user, pid, amount)
        self._update_history()

    def harvest(self, user, pid):
        paid = self.staking_pool.harvest(user, pid)
        self._update_history()
        return paid

    def unstake(self, user, pid):
        sent = self.staking_pool.withdraw(user, pid)
        self._update_history()
        return sent

    def advance(self, seconds):
        """Moves simulated time forward and records the ledger state."""
        self.clock.advance(int(seconds))
        self._update_history()

    def _update_history(self):
        self.time_history.append(self.clock.now())
        self.reserve_history.append(self.staking_pool.reward_reserve)
        self.total_staked_history.append(self.staking_pool.total_staked)
        self.time_to_empty_history.append(self.staking_pool.time_to_empty())
        self.rewards_paid_history.append(self.rewards_paid)

    def simulate(self, days, num_users=10, deposit_range=(100, 10_000), deposit_probability=0.3,
                 harvest_probability=0.2, withdraw_probability=0.05, seed=None, plot_results=False):
        """
        Simulates random user activity across all pools.

        Each day every user may deposit, harvest or withdraw in a random pool,
        then a day passes. Ledger invariants are checked after every day.

        Args:
            days: Number of simulated days
            num_users: Number of distinct depositors
            deposit_range: Inclusive bounds of a deposit, in whole tokens
            deposit_probability: Daily chance a user deposits
            harvest_probability: Daily chance a user harvests
            withdraw_probability: Daily chance a user withdraws
            seed: Seed for the random generator
            plot_results: Whether to plot the recorded history

        Returns:
            Dictionary of summary statistics
        """
        if self.staking_pool.total_pools == 0:
            raise ValueError("Add at least one pool before simulating")

        rng = np.random.default_rng(seed)
        users = [f"user{i}" for i in range(num_users)]
        counts = {"deposits": 0, "harvests": 0, "withdrawals": 0}

        for day in range(days):
            for user in users:
                pid = int(rng.integers(0, self.staking_pool.total_pools))
                position = self.staking_pool.get_user_info(pid, user)
                roll = rng.random()

                if roll < deposit_probability:
                    if not self.staking_pool.pools[pid].is_active:
                        continue
                    whole_tokens = int(rng.integers(deposit_range[0], deposit_range[1] + 1))
                    self.stake(user, pid, whole_tokens * TOKEN_UNIT)
                    counts["deposits"] += 1
                elif roll < deposit_probability + harvest_probability and position.is_active:
                    self.harvest(user, pid)
                    counts["harvests"] += 1
                elif roll < deposit_probability + harvest_probability + withdraw_probability and position.is_active:
                    self.unstake(user, pid)
                    counts["withdrawals"] += 1

            self.advance(SECONDS_PER_DAY)
            self.staking_pool.check_invariants()
            logger.debug("Day %s: reserve %s, staked %s", day + 1,
                         self.staking_pool.reward_reserve, self.staking_pool.total_staked)

        if plot_results:
            self.plot_history()

        return {
            "days": days,
            "final_reserve": self.staking_pool.reward_reserve,
            "final_total_staked": self.staking_pool.total_staked,
            "rewards_paid": self.rewards_paid,
            "time_to_empty_days": self.staking_pool.time_to_empty() / SECONDS_PER_DAY,
            **counts,
        }

    def plot_history(self, show=True):
        """
        Plots reserve, staked principal, rewards paid and reserve runway.

        Returns:
            The matplotlib figure
        """
        def to_tokens(values):
            return np.array(values, dtype=float) / TOKEN_UNIT

        days = np.array(self.time_history, dtype=float) / SECONDS_PER_DAY

        fig, axs = plt.subplots(4, 1, figsize=(12, 16), sharex=True)

        axs[0].plot(days, to_tokens(self.reserve_history))
        axs[0].set_title('Reward Reserve')
        axs[0].set_ylabel('Tokens')

        axs[1].plot(days, to_tokens(self.total_staked_history))
        axs[1].set_title('Total Staked')
        axs[1].set_ylabel('Tokens')

        axs[2].plot(days, to_tokens(self.rewards_paid_history))
        axs[2].set_title('Rewards Paid')
        axs[2].set_ylabel('Tokens')

        axs[3].plot(days, np.array(self.time_to_empty_history, dtype=float) / SECONDS_PER_DAY)
        axs[3].set_title('Estimated Reserve Runway')
        axs[3].set_ylabel('Days')
        axs[3].set_xlabel('Days')

        plt.tight_layout()
        if show:
            plt.show()
        return fig
