"""
Simple simulation for the staking reward ledger.

This script walks one depositor through a locked pool and one through an
unlocked pool, printing what each settlement pays.
"""

import logging
import os
import sys

# Add the core directory to the path
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "core"))
from staking_config import SECONDS_PER_DAY
from staking_model import TOKEN_UNIT, StakingEconomicModel

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def tokens(amount):
    return amount / TOKEN_UNIT


def run_basic_simulation():
    model = StakingEconomicModel()
    pool = model.staking_pool

    print("Creating pools...")
    flexible = model.add_pool(apr=1500, lock_days=0)
    locked = model.add_pool(apr=3000, lock_days=30)
    print(f"Pool {flexible}: 15% APR, no lock")
    print(f"Pool {locked}: 30% APR, 30 day lock")

    print("\nFunding reward reserve with 50,000 tokens...")
    model.fund_reserve(50_000 * TOKEN_UNIT)

    print("\nStaking...")
    model.stake("alice", flexible, 10_000 * TOKEN_UNIT)
    model.stake("bob", locked, 10_000 * TOKEN_UNIT)
    print(f"  Total staked: {tokens(pool.total_staked):,.2f}")
    print(f"  Reserve runway: {pool.time_to_empty() / SECONDS_PER_DAY:,.1f} days")

    model.advance(10 * SECONDS_PER_DAY)
    print("\nAfter 10 days:")
    print(f"  alice pending: {tokens(pool.pending_reward(flexible, 'alice')):,.4f}")
    print(f"  bob pending: {tokens(pool.pending_reward(locked, 'bob')):,.4f}")

    paid = model.harvest("alice", flexible)
    print(f"  alice harvested {tokens(paid):,.4f}")
    paid = model.harvest("bob", locked)
    bob = pool.get_user_info(locked, "bob")
    print(f"  bob harvested {tokens(paid):,.4f}, locked up {tokens(bob.reward_locked_up):,.4f}")

    model.advance(25 * SECONDS_PER_DAY)
    print("\nAfter 35 days:")
    paid = model.harvest("bob", locked)
    print(f"  bob harvested {tokens(paid):,.4f} (lock has passed)")

    sent = model.unstake("alice", flexible)
    print(f"  alice withdrew {tokens(sent):,.2f}")

    print("\nFinal ledger state:")
    print(f"  Reserve: {tokens(pool.reward_tokens):,.4f}")
    print(f"  Rewards paid: {tokens(model.rewards_paid):,.4f}")
    print(f"  Total staked: {tokens(pool.total_staked):,.2f}")


if __name__ == "__main__":
    run_basic_simulation()
