"""
Unit tests for the reward token and the clocks the ledger depends on.
"""

import unittest
import sys
import os

# Add the core directory to the path
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "core"))

from clock import ManualClock, SystemClock
from reward_token import RewardToken


class TestRewardToken(unittest.TestCase):
    def setUp(self):
        self.token = RewardToken()
        self.token.mint("alice", 100)

    def test_mint(self):
        self.assertEqual(self.token.balance_of("alice"), 100)
        self.assertEqual(self.token.total_supply, 100)
        with self.assertRaises(ValueError):
            self.token.mint("alice", 0)

    def test_transfer(self):
        self.assertTrue(self.token.transfer("alice", "bob", 40))
        self.assertEqual(self.token.balance_of("alice"), 60)
        self.assertEqual(self.token.balance_of("bob"), 40)

    def test_transfer_is_all_or_nothing(self):
        self.assertFalse(self.token.transfer("alice", "bob", 101))
        self.assertEqual(self.token.balance_of("alice"), 100)
        self.assertEqual(self.token.balance_of("bob"), 0)

    def test_transfer_from_consumes_allowance(self):
        self.token.approve("alice", "pool", 50)
        self.assertTrue(self.token.transfer_from("pool", "alice", "pool", 30))
        self.assertEqual(self.token.allowance("alice", "pool"), 20)
        self.assertFalse(self.token.transfer_from("pool", "alice", "pool", 30))
        self.assertEqual(self.token.balance_of("pool"), 30)

    def test_transfer_from_without_balance(self):
        self.token.approve("alice", "pool", 500)
        self.assertFalse(self.token.transfer_from("pool", "alice", "pool", 200))
        self.assertEqual(self.token.allowance("alice", "pool"), 500)

    def test_snapshot_and_restore(self):
        state = self.token.snapshot()
        self.token.transfer("alice", "bob", 10)
        self.token.mint("carol", 5)
        self.token.restore(state)
        self.assertEqual(self.token.balance_of("alice"), 100)
        self.assertEqual(self.token.balance_of("bob"), 0)
        self.assertEqual(self.token.total_supply, 100)


class TestClocks(unittest.TestCase):
    def test_manual_clock(self):
        clock = ManualClock(10)
        self.assertEqual(clock.now(), 10)
        self.assertEqual(clock.advance(5), 15)
        self.assertEqual(clock.set_time(20), 20)
        with self.assertRaises(ValueError):
            clock.advance(-1)
        with self.assertRaises(ValueError):
            clock.set_time(19)

    def test_system_clock_never_decreases(self):
        clock = SystemClock()
        first = clock.now()
        self.assertGreater(first, 0)
        self.assertGreaterEqual(clock.now(), first)


if __name__ == "__main__":
    unittest.main()
