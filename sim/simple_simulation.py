"""
Simple simulation for the stablecoin engine.

This script walks through a minimal scenario: a few borrowers open
positions, the price of ETH crashes and a liquidator repays the unhealthy debt.
"""

import os
import sys

# Add the project root to the path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from stablecoin_model.config import load_config
from stablecoin_model.deploy import deploy_engine
from stablecoin_model.errors import EngineError
from stablecoin_model.logging_setup import configure_logging

ETHER = 10**18


def print_state(deployment):
    engine = deployment.engine
    print(f"  Debt supply: {deployment.debt_token.total_supply / ETHER:.2f} DSC")
    print(f"  Collateral value: ${engine.collateral.total_collateral_value_usd() / ETHER:.2f}")
    print(f"  ETH price: ${deployment.feed('WETH').fetch_price() / 10**deployment.feed('WETH').decimals:.2f}")
    for account in engine.state.accounts():
        debt, value = engine.get_account_information(account)
        health_factor = engine.get_health_factor(account)
        shown = "inf" if not debt else f"{health_factor / ETHER:.3f}"
        print(f"  {account}: {debt / ETHER:.2f} DSC against ${value / ETHER:.2f}, HF {shown}")


def run_basic_simulation():
    cfg = load_config()
    configure_logging(cfg.log_level)
    deployment = deploy_engine(cfg.network("local"), cfg.engine)
    engine = deployment.engine
    weth = deployment.token("WETH")

    print("Opening positions...")
    # Borrowers at health factors 1.6, 1.4 and 1.2
    for i, debt in enumerate((6_250, 7_142, 8_333)):
        account = f"user{i}"
        weth.mint(account, 10 * ETHER)
        weth.approve(account, engine.address, 10 * ETHER)
        engine.deposit_collateral_and_mint_debt(account, "WETH", 10 * ETHER, debt * ETHER)
        print(f"{account}: 10.00 ETH, {debt:.2f} DSC")

    print("\nFunding liquidator...")
    wbtc = deployment.token("WBTC")
    wbtc.mint("liquidator", 100 * 10**8)
    wbtc.approve("liquidator", engine.address, 100 * 10**8)
    engine.deposit_collateral_and_mint_debt("liquidator", "WBTC", 100 * 10**8, 20_000 * ETHER)
    deployment.debt_token.approve("liquidator", engine.address, 20_000 * ETHER)

    print("\nInitial protocol state:")
    print_state(deployment)

    # Simulate a price change
    new_price = 1_100
    print(f"\nSimulating price drop to ${new_price:.2f}")
    deployment.set_price("WETH", new_price)

    liquidatable = engine.get_liquidatable_accounts()
    if liquidatable:
        print(f"Accounts eligible for liquidation: {liquidatable}")
        for account in liquidatable:
            debt = engine.get_account_information(account)[0]
            try:
                result = engine.liquidate("liquidator", account, "WETH", debt)
            except EngineError as exc:
                print(f"Could not liquidate {account}: {exc}")
                continue
            print(f"Liquidated {account}: {result.total_collateral_seized / ETHER:.4f} ETH seized")
    else:
        print("No accounts eligible for liquidation at this price")

    print("\nFinal protocol state:")
    print_state(deployment)


if __name__ == "__main__":
    run_basic_simulation()
