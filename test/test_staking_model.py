"""
Unit tests for the staking economic model.
"""

import unittest
import sys
import os

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

# Add the core directory to the path
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "core"))
from staking_config import SECONDS_PER_DAY
from staking_model import TOKEN_UNIT, StakingEconomicModel


class TestStakingEconomicModel(unittest.TestCase):
    def setUp(self):
        """Initialize a fresh model with two pools and a funded reserve"""
        self.model = StakingEconomicModel()
        self.flexible = self.model.add_pool(1000, 0)
        self.locked = self.model.add_pool(2500, 14)
        self.model.fund_reserve(50_000 * TOKEN_UNIT)

    def test_fund_reserve(self):
        self.assertEqual(self.model.staking_pool.reward_tokens, 50_000 * TOKEN_UNIT)
        self.assertEqual(self.model.total_funded, 50_000 * TOKEN_UNIT)
        self.assertEqual(self.model.rewards_paid, 0)

    def test_stake_harvest_unstake(self):
        self.model.stake("alice", self.flexible, 1_000 * TOKEN_UNIT)
        self.model.advance(SECONDS_PER_DAY)

        paid = self.model.harvest("alice", self.flexible)
        sent = self.model.unstake("alice", self.flexible)

        self.assertGreater(paid, 0)
        self.assertEqual(sent, 1_000 * TOKEN_UNIT)
        self.assertEqual(self.model.rewards_paid, paid)
        self.assertEqual(self.model.token.balance_of("alice"), 1_000 * TOKEN_UNIT + paid)

    def test_recovered_reserve_is_not_counted_as_paid(self):
        recovered = self.model.recover_reserve("treasury")

        self.assertEqual(recovered, 50_000 * TOKEN_UNIT)
        self.assertEqual(self.model.rewards_paid, 0)
        self.assertEqual(self.model.rewards_paid_history[-1], 0)
        self.assertEqual(self.model.reserve_history[-1], 0)
        self.assertEqual(self.model.token.balance_of("treasury"), 50_000 * TOKEN_UNIT)

    def test_history_tracks_every_step(self):
        start = len(self.model.time_history)
        self.model.stake("alice", self.locked, 500 * TOKEN_UNIT)
        self.model.advance(SECONDS_PER_DAY)

        self.assertEqual(len(self.model.time_history), start + 2)
        self.assertEqual(self.model.total_staked_history[-1], 500 * TOKEN_UNIT)
        self.assertGreater(self.model.time_to_empty_history[-1], 0)

    def test_simulate(self):
        results = self.model.simulate(30, num_users=8, seed=42)

        self.assertEqual(results["days"], 30)
        self.assertGreater(results["deposits"], 0)
        self.assertEqual(results["final_total_staked"], self.model.staking_pool.total_staked)
        self.assertEqual(results["final_reserve"] + results["rewards_paid"], 50_000 * TOKEN_UNIT)
        self.assertTrue(self.model.staking_pool.check_invariants())

        reserve = self.model.reserve_history
        self.assertTrue(all(later <= earlier for earlier, later in zip(reserve[1:], reserve[2:])))

    def test_simulate_is_reproducible(self):
        other = StakingEconomicModel()
        other.add_pool(1000, 0)
        other.add_pool(2500, 14)
        other.fund_reserve(50_000 * TOKEN_UNIT)

        self.assertEqual(self.model.simulate(10, seed=3), other.simulate(10, seed=3))

    def test_simulate_requires_pool(self):
        with self.assertRaises(ValueError):
            StakingEconomicModel().simulate(5)

    def test_plot_history(self):
        self.model.stake("alice", self.flexible, 1_000 * TOKEN_UNIT)
        self.model.advance(SECONDS_PER_DAY)

        fig = self.model.plot_history(show=False)

        self.assertEqual(len(fig.axes), 4)
        plt.close(fig)


if __name__ == "__main__":
    unittest.main()
