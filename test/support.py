"""
Shared setup for the engine tests: a local deployment with WETH (18 decimals,
$2000) and WBTC (8 decimals, $1000), both priced by 8-decimal feeds.
"""

import os
import sys

# Add the project root to the path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from stablecoin_model.config import AssetConfig, NetworkConfig
from stablecoin_model.deploy import deploy_engine
from stablecoin_model.price_feed import SimulationClock

ETHER = 10**18
WETH = "WETH"
WBTC = "WBTC"

LOCAL_NETWORK = NetworkConfig(
    name="local",
    debt_token_symbol="DSC",
    assets=(
        AssetConfig(symbol=WETH, decimals=18, feed_decimals=8, initial_price=2000),
        AssetConfig(symbol=WBTC, decimals=8, feed_decimals=8, initial_price=1000),
    ),
)


def deploy_local(params=None):
    """Fresh local deployment on its own simulation clock."""
    return deploy_engine(LOCAL_NETWORK, params, SimulationClock())


def fund(deployment, account, symbol, amount):
    """Mints collateral to ``account`` and approves the engine to pull it."""
    token = deployment.token(symbol)
    token.mint(account, amount)
    engine = deployment.engine.address
    token.approve(account, engine, token.allowance(account, engine) + amount)


def approve_debt(deployment, account, amount):
    deployment.debt_token.approve(account, deployment.engine.address, amount)
