"""
Liquidation of unhealthy accounts.

A liquidator repays part (or all) of an unhealthy account's debt with its own
debt tokens and receives the equivalent amount of one collateral asset plus a
bonus. The liquidation process follows these steps:
1. Check the account is eligible (health factor below the minimum)
2. Convert the covered debt to collateral units and add the bonus
3. Move the collateral from the account to the liquidator
4. Burn the covered debt from the liquidator's balance
5. Check the account's health factor did not get worse
6. Check the liquidator is still healthy itself

The engine runs all of this inside one transaction, so any failed check undoes
every step.
"""

import logging
from dataclasses import dataclass
from typing import List

from .constants import LIQUIDATION_BONUS, LIQUIDATION_PRECISION
from .errors import (
    BurnExceedsDebt,
    HealthFactorNotImproved,
    HealthFactorOk,
    InsufficientCollateralToLiquidate,
    ZeroAmount,
)
from .events import Operation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiquidationResult:
    """
    Values computed during a single liquidation.
    """
    account: str                  # Liquidated account
    liquidator: str               # Account that paid the debt and received collateral
    asset: str                    # Collateral asset seized
    debt_covered: int             # Debt units repaid by the liquidator
    collateral_seized: int        # Collateral equivalent of debt_covered
    bonus_collateral: int         # Extra collateral paid as incentive
    starting_health_factor: int
    ending_health_factor: int

    @property
    def total_collateral_seized(self) -> int:
        return self.collateral_seized + self.bonus_collateral


class LiquidationEngine:
    """
    Liquidation logic of the engine.

    Works on the engine's components and its internal redeem/burn steps; it is
    only entered through ``StablecoinEngine.liquidate`` so it always runs inside
    the engine's transaction.
    """

    def __init__(self, engine, liquidation_bonus: int = LIQUIDATION_BONUS):
        self.engine = engine
        self.liquidation_bonus = liquidation_bonus

    def collateral_to_seize(self, asset, debt_to_cover: int):
        """
        Returns ``(collateral_for_debt, total_with_bonus)`` in native units of ``asset``.
        """
        collateral_for_debt = self.engine.valuation.token_amount_from_usd(asset, debt_to_cover)
        total = collateral_for_debt * (LIQUIDATION_PRECISION + self.liquidation_bonus) // LIQUIDATION_PRECISION
        return collateral_for_debt, total

    def liquidate(self, liquidator, account, asset, debt_to_cover: int) -> LiquidationResult:
        """
        Liquidates ``debt_to_cover`` of ``account``'s debt against ``asset``.

        Args:
            liquidator: Account paying the debt with its own debt tokens
            account: Unhealthy account being liquidated
            asset: Collateral asset to seize
            debt_to_cover: Debt units to repay

        Returns:
            LiquidationResult with the detailed results of the liquidation

        Raises:
            ZeroAmount: if debt_to_cover is not positive
            UnsupportedAsset: if asset is not collateral
            HealthFactorOk: if the account is not eligible for liquidation
            BurnExceedsDebt: if debt_to_cover is more than the account owes
            InsufficientCollateralToLiquidate: if the account holds too little of asset
            HealthFactorNotImproved: if the account ends up less healthy
            BreaksHealthFactor: if the liquidator ends up unhealthy
        """
        engine = self.engine
        if debt_to_cover <= 0:
            raise ZeroAmount("debt to cover")
        engine.collateral.require_supported(asset)

        starting_health_factor = engine.health.health_factor(account)
        if starting_health_factor >= engine.min_health_factor:
            raise HealthFactorOk(starting_health_factor)

        debt = engine.state.get_debt(account)
        if debt_to_cover > debt:
            raise BurnExceedsDebt(debt_to_cover, debt)

        collateral_for_debt, total_to_seize = self.collateral_to_seize(asset, debt_to_cover)
        available = engine.collateral.balance_of(account, asset)
        if available < total_to_seize:
            raise InsufficientCollateralToLiquidate(asset, total_to_seize, available)

        if total_to_seize > 0:
            engine._redeem_collateral(asset, total_to_seize, account, liquidator)
        engine._burn_debt(debt_to_cover, account, liquidator)

        ending_health_factor = engine.health.health_factor(account)
        if ending_health_factor < starting_health_factor:
            raise HealthFactorNotImproved(starting_health_factor, ending_health_factor)
        engine.health.revert_if_health_factor_is_broken(liquidator)

        result = LiquidationResult(
            account=account,
            liquidator=liquidator,
            asset=asset,
            debt_covered=debt_to_cover,
            collateral_seized=collateral_for_debt,
            bonus_collateral=total_to_seize - collateral_for_debt,
            starting_health_factor=starting_health_factor,
            ending_health_factor=ending_health_factor,
        )
        engine._emit(
            Operation.LIQUIDATED, account, asset=asset, amount=debt_to_cover, counterparty=liquidator,
            details={"collateral_seized": total_to_seize},
        )
        return result

    def liquidatable_accounts(self) -> List[str]:
        """Accounts with debt whose health factor is below the minimum."""
        engine = self.engine
        return [
            account for account in engine.state.accounts()
            if engine.state.get_debt(account) > 0 and not engine.health.is_healthy(account)
        ]
