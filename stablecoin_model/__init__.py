"""
Economic model of an over-collateralized stablecoin engine.

Users lock a basket of collateral assets and mint a USD-pegged debt token
against it; unhealthy positions can be liquidated by third parties for a bonus.
"""

from .engine import StablecoinEngine
from .liquidation import LiquidationResult
from .tokens import DebtToken, Erc20Token
from .price_feed import MockPriceFeed, SimulationClock

__all__ = [
    "StablecoinEngine",
    "LiquidationResult",
    "DebtToken",
    "Erc20Token",
    "MockPriceFeed",
    "SimulationClock",
]
