"""
Health factor computation.

The health factor is the risk-adjusted collateral value divided by minted
debt, in 18-decimal fixed point. ``1e18`` or more is healthy; anything below
can be liquidated. Accounts without debt report ``MAX_HEALTH_FACTOR``.
"""

from .collateral import CollateralAccounting
from .constants import (
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MAX_HEALTH_FACTOR,
    MIN_HEALTH_FACTOR,
    PRECISION,
)
from .errors import BreaksHealthFactor
from .state import EngineState


def calculate_health_factor(total_debt: int, collateral_value_usd: int,
                            liquidation_threshold: int = LIQUIDATION_THRESHOLD) -> int:
    """
    Health factor for a given debt and collateral value.

    Args:
        total_debt: Minted debt in 18-decimal units
        collateral_value_usd: Collateral value in 18-decimal USD
        liquidation_threshold: Percentage of collateral value that may back debt

    Returns:
        ``collateral_value_usd * threshold / 100 * 1e18 / total_debt`` rounded
        down, or ``MAX_HEALTH_FACTOR`` when there is no debt
    """
    if total_debt == 0:
        return MAX_HEALTH_FACTOR
    collateral_adjusted_for_threshold = (collateral_value_usd * liquidation_threshold) // LIQUIDATION_PRECISION
    return (collateral_adjusted_for_threshold * PRECISION) // total_debt


class HealthEngine:
    def __init__(self, state: EngineState, collateral: CollateralAccounting,
                 liquidation_threshold: int = LIQUIDATION_THRESHOLD,
                 min_health_factor: int = MIN_HEALTH_FACTOR):
        self.state = state
        self.collateral = collateral
        self.liquidation_threshold = liquidation_threshold
        self.min_health_factor = min_health_factor

    def account_information(self, account):
        """Returns ``(debt_minted, collateral_value_usd)``."""
        return self.state.get_debt(account), self.collateral.account_collateral_value_usd(account)

    def health_factor(self, account) -> int:
        total_debt = self.state.get_debt(account)
        if total_debt == 0:
            return MAX_HEALTH_FACTOR
        collateral_value = self.collateral.account_collateral_value_usd(account)
        return calculate_health_factor(total_debt, collateral_value, self.liquidation_threshold)

    def is_healthy(self, account) -> bool:
        return self.health_factor(account) >= self.min_health_factor

    def revert_if_health_factor_is_broken(self, account):
        health_factor = self.health_factor(account)
        if health_factor < self.min_health_factor:
            raise BreaksHealthFactor(health_factor)
