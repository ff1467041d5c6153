"""
Valuation of collateral in USD.

Converts native asset units to 18-decimal USD and back using the asset's price
feed. Feeds are untrusted: every answer is checked for staleness and validity
before use, and every division rounds down so collateral is never overstated.
"""

import logging
from typing import Dict, Tuple

from .constants import ORACLE_TIMEOUT_SECONDS, USD_DECIMALS
from .errors import InvalidPrice, StalePrice, UnsupportedAsset
from .state import Asset

logger = logging.getLogger(__name__)


class Valuation:
    def __init__(self, assets: Dict[str, Asset], clock, timeout: int = ORACLE_TIMEOUT_SECONDS):
        self.assets = assets
        self.clock = clock
        self.timeout = timeout

    def get_asset(self, asset) -> Asset:
        try:
            return self.assets[asset]
        except KeyError:
            raise UnsupportedAsset(asset) from None

    def get_latest_price(self, asset) -> Tuple[int, int, int]:
        """
        Reads the asset's feed and validates the answer.

        A round is stale when it was never updated, when it was answered in an
        earlier round than the one reported, when its timestamp lies in the
        future, or when it is older than ``timeout`` seconds.

        Returns:
            ``(price, price_decimals, updated_at)``

        Raises:
            StalePrice: if the round fails any freshness check
            InvalidPrice: if the answer is not strictly positive
        """
        feed = self.get_asset(asset).price_feed
        round_id, answer, _started_at, updated_at, answered_in_round = feed.latest_round_data()
        now = self.clock.now()

        stale = (
            updated_at == 0
            or answered_in_round < round_id
            or updated_at > now
            or now - updated_at > self.timeout
        )
        if stale:
            logger.warning(
                "Rejecting stale price for %s (round %s answered in %s, updated %s, now %s)",
                asset, round_id, answered_in_round, updated_at, now,
            )
            raise StalePrice(asset, updated_at, now)
        if answer <= 0:
            logger.warning("Rejecting invalid price for %s: %s", asset, answer)
            raise InvalidPrice(asset, answer)

        return answer, feed.decimals, updated_at

    def usd_value(self, asset, amount: int) -> int:
        """
        Value of ``amount`` native units of ``asset`` in 18-decimal USD.

        ``usd = amount * price * 10**18 / 10**(asset_decimals + price_decimals)``,
        rounded down.
        """
        price, price_decimals, _ = self.get_latest_price(asset)
        scale = self.get_asset(asset).decimals + price_decimals
        return (amount * price * 10**USD_DECIMALS) // 10**scale

    def token_amount_from_usd(self, asset, usd_amount: int) -> int:
        """Native units of ``asset`` worth ``usd_amount`` (18-decimal USD), rounded down."""
        price, price_decimals, _ = self.get_latest_price(asset)
        scale = self.get_asset(asset).decimals + price_decimals
        return (usd_amount * 10**scale) // (price * 10**USD_DECIMALS)
