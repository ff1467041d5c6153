"""
Visualization simulation for the stablecoin engine.

This script runs a month of random price movements with a liquidation keeper
and plots the results.
"""

import os
import sys

# Add the project root to the path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from stablecoin_model.config import load_config
from stablecoin_model.deploy import deploy_engine
from stablecoin_model.logging_setup import configure_logging
from stablecoin_model.simulation import MarketSimulation


def run_visualization_simulation():
    cfg = load_config()
    configure_logging(cfg.log_level)
    deployment = deploy_engine(cfg.network("local"), cfg.engine)
    sim = MarketSimulation(deployment)

    print("Opening positions...")
    # Health factors from 1.1 to 2.0
    for account in sim.open_positions(10, min_units=2.0, max_units=10.0, min_health_factor=1.1):
        debt, value = deployment.engine.get_account_information(account)
        print(f"{account}: ${value / 10**18:.2f} collateral, {debt / 10**18:.2f} DSC")

    print("\nFunding liquidator...")
    debt = sim.fund_liquidator("WBTC", 200)
    print(f"Liquidator holds {debt / 10**18:.2f} DSC")

    # Run a simulation with price movements and plot results
    print("\nRunning simulation with visualizations...")
    results = sim.simulate_market_scenario(30, price_volatility=0.03, plot_results=True)

    print("\nSimulation Results:")
    for key, value in results.items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    run_visualization_simulation()
