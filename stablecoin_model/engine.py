"""
Stablecoin Engine Model.

This module simulates the engine contract of an over-collateralized stablecoin.
Users lock a basket of collateral assets and mint a USD-pegged debt token
against it; the engine keeps every account at or above the minimum health
factor for the operations the account itself initiates, and lets third parties
liquidate accounts that fall below it after price moves.

The engine is responsible for:
1. Collateral custody and per-account collateral bookkeeping
2. Minting and burning the debt token (it owns the token's mint capability)
3. Enforcing the minimum health factor after deposits, withdrawals, mints and burns
4. Liquidating unhealthy accounts (see ``liquidation``)
5. Exposing read-only queries over accounts, prices and protocol parameters

Every state-changing entry point is a single atomic unit of work: the engine
state, the collateral and debt token ledgers and the event log are restored if
any step raises, and the error reaches the caller unchanged. Inside an
operation, internal ledgers are updated before any token transfer is issued
and solvency checks read the updated state.
"""

import functools
import logging
from typing import Dict, List, Optional

from .collateral import CollateralAccounting
from .constants import (
    ADDITIONAL_FEED_PRECISION,
    LIQUIDATION_BONUS,
    LIQUIDATION_PRECISION,
    LIQUIDATION_THRESHOLD,
    MIN_HEALTH_FACTOR,
    ORACLE_TIMEOUT_SECONDS,
    PRECISION,
)
from .errors import (
    BurnExceedsDebt,
    ReentrantCall,
    TokenAddressesAndPriceFeedAddressesMustBeSameLength,
    TokenError,
    TransferFailed,
    ValidationError,
    ZeroAmount,
)
from .events import EngineEvent, Operation
from .health import HealthEngine, calculate_health_factor
from .liquidation import LiquidationEngine
from .price_feed import SystemClock
from .state import Asset, EngineState
from .valuation import Valuation

logger = logging.getLogger(__name__)


def atomic(method):
    """
    Runs an engine entry point as one all-or-nothing transaction.

    Re-entering the engine while a transaction is open raises ``ReentrantCall``.
    """
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if self._entered:
            raise ReentrantCall()
        self._entered = True
        snapshot = self._snapshot()
        try:
            return method(self, *args, **kwargs)
        except Exception:
            self._restore(snapshot)
            logger.debug("%s rolled back", method.__name__)
            raise
        finally:
            self._entered = False
    return wrapper


class StablecoinEngine:
    """
    Simulates the stablecoin engine contract.

    Args:
        collateral_tokens: Token ledgers of the supported collateral assets;
            each token's ``address`` identifies the asset
        price_feeds: One price feed per collateral token, in the same order
        debt_token: The debt token; the engine must be (or become) its owner
        clock: Source of the current time for oracle staleness checks
        address: Identity of the engine in the token ledgers
    """

    def __init__(self, collateral_tokens, price_feeds, debt_token, clock=None, address="engine",
                 liquidation_threshold: int = LIQUIDATION_THRESHOLD,
                 liquidation_bonus: int = LIQUIDATION_BONUS,
                 min_health_factor: int = MIN_HEALTH_FACTOR,
                 oracle_timeout: int = ORACLE_TIMEOUT_SECONDS):
        collateral_tokens = list(collateral_tokens)
        price_feeds = list(price_feeds)
        if len(collateral_tokens) != len(price_feeds):
            raise TokenAddressesAndPriceFeedAddressesMustBeSameLength(len(collateral_tokens), len(price_feeds))

        self.assets: Dict[str, Asset] = {}
        for token, feed in zip(collateral_tokens, price_feeds):
            if token.address in self.assets:
                raise ValidationError(f"Duplicate collateral asset: {token.address}")
            self.assets[token.address] = Asset(
                address=token.address,
                decimals=token.decimals,
                price_feed=feed,
                token=token,
            )

        self.address = address
        self.debt_token = debt_token
        self.clock = clock or SystemClock()

        self.liquidation_threshold = liquidation_threshold
        self.liquidation_bonus = liquidation_bonus
        self.min_health_factor = min_health_factor

        # Components, all sharing the one state store
        self.state = EngineState()
        self.valuation = Valuation(self.assets, self.clock, oracle_timeout)
        self.collateral = CollateralAccounting(self.state, self.assets, self.valuation)
        self.health = HealthEngine(self.state, self.collateral, liquidation_threshold, min_health_factor)
        self.liquidation = LiquidationEngine(self, liquidation_bonus)

        self.events: List[EngineEvent] = []
        self._entered = False

    # --- Position management ---

    @atomic
    def deposit_collateral(self, account, asset, amount):
        """
        Locks ``amount`` of ``asset`` from ``account`` in the engine.

        The account must have approved the engine to move the tokens. Adding
        collateral can only raise the health factor, so no health check follows.

        Raises:
            ZeroAmount: if amount is not positive
            UnsupportedAsset: if the asset is not collateral
            TransferFailed: if the token pull fails
        """
        self._deposit_collateral(account, asset, amount)

    @atomic
    def redeem_collateral(self, account, asset, amount):
        """
        Returns ``amount`` of ``asset`` to ``account``.

        Raises:
            InsufficientCollateral: if the account has less deposited
            BreaksHealthFactor: if the withdrawal leaves the account unhealthy
        """
        self._require_more_than_zero(amount)
        self.collateral.require_supported(asset)
        self._redeem_collateral(asset, amount, account, account)
        self.health.revert_if_health_factor_is_broken(account)

    @atomic
    def mint_debt(self, account, amount):
        """
        Mints ``amount`` of debt token to ``account`` against its collateral.

        Raises:
            ZeroAmount: if amount is not positive
            BreaksHealthFactor: if the new debt leaves the account unhealthy
        """
        self._mint_debt(account, amount)

    @atomic
    def burn_debt(self, account, amount):
        """
        Repays ``amount`` of the account's debt with its own debt tokens.

        The account must have approved the engine to pull the tokens.
        Repaying can only raise the health factor, so no health check follows
        and an account below the minimum may repay part of its debt.

        Raises:
            ZeroAmount: if amount is not positive
            BurnExceedsDebt: if amount is more than the account has minted
            TransferFailed: if the debt tokens cannot be pulled
        """
        self._burn_debt(amount, account, account)

    @atomic
    def deposit_collateral_and_mint_debt(self, account, asset, collateral_amount, mint_amount):
        """Deposits collateral and mints debt in one step; if the mint fails the deposit is undone."""
        self._deposit_collateral(account, asset, collateral_amount)
        self._mint_debt(account, mint_amount)

    @atomic
    def redeem_collateral_for_debt(self, account, asset, collateral_amount, burn_amount):
        """
        Burns debt and then withdraws collateral in one step.

        Burning first avoids rejecting withdrawals the repayment makes safe;
        health is checked once, after both steps.
        """
        self._require_more_than_zero(collateral_amount)
        self.collateral.require_supported(asset)
        self._burn_debt(burn_amount, account, account)
        self._redeem_collateral(asset, collateral_amount, account, account)
        self.health.revert_if_health_factor_is_broken(account)

    @atomic
    def liquidate(self, liquidator, account, asset, debt_to_cover):
        """
        Covers ``debt_to_cover`` of an unhealthy account's debt with the
        liquidator's tokens in exchange for its collateral plus a bonus.

        Returns:
            LiquidationResult describing the seizure
        """
        return self.liquidation.liquidate(liquidator, account, asset, debt_to_cover)

    # --- Internal steps (no transaction of their own) ---

    def _deposit_collateral(self, account, asset, amount):
        self._require_more_than_zero(amount)
        self.collateral.require_supported(asset)

        self.collateral.credit(account, asset, amount)
        self._emit(Operation.COLLATERAL_DEPOSITED, account, asset=asset, amount=amount)

        token = self.assets[asset].token
        self._transfer(token, account, self.address, amount, pull=True)

    def _redeem_collateral(self, asset, amount, from_account, to_account):
        self.collateral.debit(from_account, asset, amount)
        self._emit(Operation.COLLATERAL_REDEEMED, from_account, asset=asset, amount=amount,
                   counterparty=to_account)

        token = self.assets[asset].token
        self._transfer(token, self.address, to_account, amount)

    def _mint_debt(self, account, amount):
        self._require_more_than_zero(amount)

        self.state.set_debt(account, self.state.get_debt(account) + amount)
        self._emit(Operation.DEBT_MINTED, account, amount=amount)

        self.debt_token.mint(self.address, account, amount)
        self.health.revert_if_health_factor_is_broken(account)

    def _burn_debt(self, amount, on_behalf_of, debt_from):
        """Reduces ``on_behalf_of``'s debt, paid with tokens pulled from ``debt_from``."""
        self._require_more_than_zero(amount)
        debt = self.state.get_debt(on_behalf_of)
        if amount > debt:
            raise BurnExceedsDebt(amount, debt)

        self.state.set_debt(on_behalf_of, debt - amount)
        self._emit(Operation.DEBT_BURNED, on_behalf_of, amount=amount, counterparty=debt_from)

        self._transfer(self.debt_token, debt_from, self.address, amount, pull=True)
        self.debt_token.burn(self.address, self.address, amount)

    def _transfer(self, token, sender, recipient, amount, pull=False):
        try:
            if pull:
                success = token.transfer_from(self.address, sender, recipient, amount)
            else:
                success = token.transfer(sender, recipient, amount)
        except TokenError as exc:
            raise TransferFailed(token.address, sender, recipient, amount) from exc
        if not success:
            raise TransferFailed(token.address, sender, recipient, amount)

    @staticmethod
    def _require_more_than_zero(amount):
        if amount <= 0:
            raise ZeroAmount()

    def _emit(self, operation, account, **fields):
        event = EngineEvent(operation=operation, account=account, **fields)
        self.events.append(event)
        logger.info("%s account=%s asset=%s amount=%s", operation.name, account, event.asset, event.amount)

    def _snapshot(self):
        return (
            self.state.snapshot(),
            {address: asset.token.snapshot() for address, asset in self.assets.items()},
            self.debt_token.snapshot(),
            len(self.events),
        )

    def _restore(self, snapshot):
        state, tokens, debt_token, n_events = snapshot
        self.state.restore(state)
        for address, token_snapshot in tokens.items():
            self.assets[address].token.restore(token_snapshot)
        self.debt_token.restore(debt_token)
        del self.events[n_events:]

    # --- Queries ---

    def get_account_information(self, account):
        """Returns ``(debt_minted, collateral_value_usd)`` for the account."""
        return self.health.account_information(account)

    def get_health_factor(self, account) -> int:
        return self.health.health_factor(account)

    def calculate_health_factor(self, total_debt: int, collateral_value_usd: int) -> int:
        return calculate_health_factor(total_debt, collateral_value_usd, self.liquidation_threshold)

    def get_usd_value(self, asset, amount: int) -> int:
        return self.valuation.usd_value(asset, amount)

    def get_token_amount_from_usd(self, asset, usd_amount: int) -> int:
        return self.valuation.token_amount_from_usd(asset, usd_amount)

    def get_account_collateral_value(self, account) -> int:
        return self.collateral.account_collateral_value_usd(account)

    def get_collateral_balance_of_user(self, account, asset) -> int:
        return self.collateral.balance_of(account, asset)

    def get_price_feed(self, asset) -> Optional[object]:
        """Price feed of a supported asset, ``None`` for anything else."""
        entry = self.assets.get(asset)
        return entry.price_feed if entry else None

    def get_collateral_tokens(self) -> List[str]:
        return list(self.assets)

    def get_debt_token(self):
        return self.debt_token

    def get_total_debt(self) -> int:
        return self.state.total_debt()

    def get_liquidatable_accounts(self) -> List[str]:
        return self.liquidation.liquidatable_accounts()

    def get_precision(self) -> int:
        return PRECISION

    def get_additional_feed_precision(self) -> int:
        return ADDITIONAL_FEED_PRECISION

    def get_liquidation_threshold(self) -> int:
        return self.liquidation_threshold

    def get_liquidation_bonus(self) -> int:
        return self.liquidation_bonus

    def get_liquidation_precision(self) -> int:
        return LIQUIDATION_PRECISION

    def get_min_health_factor(self) -> int:
        return self.min_health_factor

    def get_timeout(self) -> int:
        return self.valuation.timeout
