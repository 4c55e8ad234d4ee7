"""
Visualization simulation for the staking reward ledger.

This script runs randomized user activity across several pools and plots how
the reward reserve drains.
"""

import logging
import os
import sys

# Add the core directory to the path
sys.path.append(os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "core"))
from staking_model import TOKEN_UNIT, StakingEconomicModel

logging.basicConfig(level=logging.WARNING)


def run_visualization_simulation():
    model = StakingEconomicModel()

    print("Creating pools...")
    for apr, lock_days in [(800, 0), (1500, 7), (3000, 90)]:
        pid = model.add_pool(apr, lock_days)
        print(f"Pool {pid}: {apr / 100:.0f}% APR, {lock_days} day lock")

    print("\nFunding reward reserve with 100,000 tokens...")
    model.fund_reserve(100_000 * TOKEN_UNIT)

    print("\nRunning simulation with visualizations...")
    results = model.simulate(180, num_users=25, seed=7, plot_results=True)

    print("\nSimulation Results:")
    for key, value in results.items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    run_visualization_simulation()
