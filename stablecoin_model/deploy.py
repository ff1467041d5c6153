"""
Deployment wiring.

Builds the collateral tokens, mock price feeds, debt token and engine for one
configured network, then hands the debt token's mint capability to the engine.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict

from .config import EngineParams, NetworkConfig
from .engine import StablecoinEngine
from .price_feed import MockPriceFeed, SimulationClock
from .tokens import DebtToken, Erc20Token

logger = logging.getLogger(__name__)

DEPLOYER = "deployer"


@dataclass
class Deployment:
    engine: StablecoinEngine
    debt_token: DebtToken
    clock: object
    tokens: Dict[str, Erc20Token] = field(default_factory=dict)      # symbol -> token
    price_feeds: Dict[str, MockPriceFeed] = field(default_factory=dict)  # symbol -> feed

    def token(self, symbol) -> Erc20Token:
        return self.tokens[symbol]

    def feed(self, symbol) -> MockPriceFeed:
        return self.price_feeds[symbol]

    def set_price(self, symbol, price_usd) -> None:
        """Publishes a whole-dollar price on the symbol's feed."""
        feed = self.price_feeds[symbol]
        feed.update_answer(int(price_usd * 10**feed.decimals))


def deploy_engine(network: NetworkConfig, params: EngineParams = None, clock=None) -> Deployment:
    """
    Deploys the engine for ``network``.

    Args:
        network: Collateral assets and debt token symbol to deploy
        params: Engine parameters, protocol defaults if omitted
        clock: Clock shared by the feeds and the engine; a fresh
            ``SimulationClock`` if omitted

    Returns:
        Deployment with the engine and every collaborator it was wired to
    """
    params = params or EngineParams()
    clock = clock or SimulationClock()

    tokens = {}
    feeds = {}
    for asset in network.assets:
        tokens[asset.symbol] = Erc20Token(asset.symbol, decimals=asset.decimals)
        feeds[asset.symbol] = MockPriceFeed(
            asset.feed_decimals, asset.initial_price * 10**asset.feed_decimals, clock
        )

    debt_token = DebtToken(network.debt_token_symbol, owner=DEPLOYER)
    engine = StablecoinEngine(
        list(tokens.values()),
        list(feeds.values()),
        debt_token,
        clock=clock,
        liquidation_threshold=params.liquidation_threshold,
        liquidation_bonus=params.liquidation_bonus,
        min_health_factor=params.min_health_factor,
        oracle_timeout=params.oracle_timeout_seconds,
    )
    debt_token.transfer_ownership(DEPLOYER, engine.address)

    logger.info("Deployed engine on %s with collateral %s", network.name, ", ".join(tokens))
    return Deployment(engine=engine, debt_token=debt_token, clock=clock, tokens=tokens, price_feeds=feeds)
