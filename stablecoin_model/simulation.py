"""
Market simulation for the stablecoin engine.

Seeds a set of borrowers, moves every collateral price along a random
log-normal path, and lets a liquidation keeper work through unhealthy accounts
after each step. System metrics are recorded per step and can be plotted.
"""

import logging
from typing import Dict, List

import matplotlib.pyplot as plt
import numpy as np

from .constants import LIQUIDATION_PRECISION, PRECISION
from .errors import ExternalCallError, SolvencyError
from .invariants import check_protocol_invariants

logger = logging.getLogger(__name__)

LIQUIDATOR = "liquidator"


class MarketSimulation:
    """
    Drives a deployed engine through a random market.

    Args:
        deployment: ``Deployment`` returned by ``deploy_engine``; its clock must
            be a ``SimulationClock``
        seed: Seed for the numpy random generator
    """

    def __init__(self, deployment, seed=None, liquidator: str = LIQUIDATOR):
        self.deployment = deployment
        self.engine = deployment.engine
        self.rng = np.random.default_rng(seed)
        self.liquidator = liquidator
        self.borrowers: List[str] = []
        self.liquidations = 0
        self.failed_liquidations = 0
        self._reset_history()

    def _reset_history(self):
        self.time_history: List[float] = []
        self.price_history: Dict[str, List[float]] = {symbol: [] for symbol in self.deployment.tokens}
        self.total_supply_history: List[float] = []
        self.collateral_value_history: List[float] = []
        self.unhealthy_history: List[int] = []
        self.violation_history: List[int] = []

    # --- Setup ---

    def _fund(self, account, symbol, units: float) -> int:
        token = self.deployment.token(symbol)
        amount = int(units * 10**token.decimals)
        token.mint(account, amount)
        token.approve(account, self.engine.address, token.allowance(account, self.engine.address) + amount)
        return amount

    def _debt_for(self, symbol, amount: int, target_health_factor: float) -> int:
        """Debt that puts ``amount`` of collateral at ``target_health_factor``."""
        value = self.engine.get_usd_value(symbol, amount)
        adjusted = value * self.engine.get_liquidation_threshold() // LIQUIDATION_PRECISION
        return adjusted * PRECISION // int(target_health_factor * PRECISION)

    def open_positions(self, n_borrowers: int, min_units: float = 1.0, max_units: float = 10.0,
                       min_health_factor: float = 1.05, max_health_factor: float = 2.0) -> List[str]:
        """
        Creates ``n_borrowers`` accounts, each depositing one random collateral
        asset and minting debt at a random health factor in the given range.
        """
        symbols = list(self.deployment.tokens)
        created = []
        for _ in range(n_borrowers):
            account = f"user{len(self.borrowers)}"
            symbol = symbols[int(self.rng.integers(len(symbols)))]
            amount = self._fund(account, symbol, float(self.rng.uniform(min_units, max_units)))
            target = float(self.rng.uniform(min_health_factor, max_health_factor))
            debt = self._debt_for(symbol, amount, target)
            if debt > 0:
                self.engine.deposit_collateral_and_mint_debt(account, symbol, amount, debt)
            else:
                self.engine.deposit_collateral(account, symbol, amount)
            self.borrowers.append(account)
            created.append(account)
        return created

    def fund_liquidator(self, symbol: str, units: float, health_factor: float = 4.0) -> int:
        """Gives the keeper collateral and debt tokens to liquidate with; returns the debt minted."""
        amount = self._fund(self.liquidator, symbol, units)
        debt = self._debt_for(symbol, amount, health_factor)
        self.engine.deposit_collateral_and_mint_debt(self.liquidator, symbol, amount, debt)
        self.deployment.debt_token.approve(self.liquidator, self.engine.address, debt)
        return debt

    # --- Keeper ---

    def _best_liquidation(self, account):
        """Largest collateral position of the account and the debt it can cover."""
        engine = self.engine
        best = None
        for symbol in engine.get_collateral_tokens():
            balance = engine.get_collateral_balance_of_user(account, symbol)
            if not balance:
                continue
            value = engine.get_usd_value(symbol, balance)
            if best is None or value > best[1]:
                best = (symbol, value)
        if best is None:
            return None, 0
        symbol, value = best
        coverable = value * LIQUIDATION_PRECISION // (LIQUIDATION_PRECISION + engine.get_liquidation_bonus())
        debt = engine.get_account_information(account)[0]
        return symbol, min(debt, coverable)

    def run_keeper(self) -> int:
        """Attempts one liquidation per unhealthy account; returns how many succeeded."""
        succeeded = 0
        for account in self.engine.get_liquidatable_accounts():
            if account == self.liquidator:
                continue
            symbol, debt_to_cover = self._best_liquidation(account)
            if not symbol or debt_to_cover <= 0:
                continue
            try:
                self.engine.liquidate(self.liquidator, account, symbol, debt_to_cover)
            except (SolvencyError, ExternalCallError) as exc:
                self.failed_liquidations += 1
                logger.debug("Keeper skipped %s: %s", account, exc)
                continue
            succeeded += 1
        self.liquidations += succeeded
        return succeeded

    # --- Simulation ---

    def _record(self):
        engine = self.engine
        self.time_history.append(self.deployment.clock.now() / (24 * 60 * 60))
        for symbol, feed in self.deployment.price_feeds.items():
            self.price_history[symbol].append(feed.fetch_price() / 10**feed.decimals)
        self.total_supply_history.append(self.deployment.debt_token.total_supply / PRECISION)
        self.collateral_value_history.append(engine.collateral.total_collateral_value_usd() / PRECISION)
        self.unhealthy_history.append(len(engine.get_liquidatable_accounts()))
        self.violation_history.append(len(check_protocol_invariants(engine)))

    def simulate_market_scenario(self, days: int, price_volatility: float = 0.02, plot_results: bool = True):
        """
        Run a simulation with random price movements over the specified period.

        Args:
            days: Number of days to simulate
            price_volatility: Daily volatility (standard deviation of log returns)
            plot_results: Whether to plot the results

        Returns:
            Dictionary with simulation results
        """
        steps = days * 24  # hourly steps
        step_size = 60 * 60
        hourly_volatility = price_volatility / np.sqrt(24)

        self._reset_history()
        log_returns = {
            symbol: self.rng.normal(0, hourly_volatility, steps) for symbol in self.deployment.price_feeds
        }

        for i in range(steps):
            self.deployment.clock.advance(step_size)
            for symbol, feed in self.deployment.price_feeds.items():
                price = feed.fetch_price() * float(np.exp(log_returns[symbol][i]))
                feed.update_answer(max(1, int(price)))
            self.run_keeper()
            self._record()

        if plot_results:
            self.plot()

        return {
            'final_prices': {symbol: prices[-1] for symbol, prices in self.price_history.items() if prices},
            'final_debt_supply': self.total_supply_history[-1] if steps else 0,
            'final_collateral_value': self.collateral_value_history[-1] if steps else 0,
            'liquidations': self.liquidations,
            'failed_liquidations': self.failed_liquidations,
            'max_unhealthy_accounts': max(self.unhealthy_history, default=0),
            'steps_with_invariant_violations': sum(1 for v in self.violation_history if v),
        }

    def plot(self):
        fig, axs = plt.subplots(4, 1, figsize=(12, 16), sharex=True)

        for symbol, prices in self.price_history.items():
            axs[0].plot(self.time_history, prices, label=symbol)
        axs[0].set_title('Collateral Prices')
        axs[0].set_ylabel('USD')
        axs[0].legend()

        axs[1].plot(self.time_history, self.total_supply_history, label='Debt supply')
        axs[1].plot(self.time_history, self.collateral_value_history, label='Collateral value')
        axs[1].set_title('Debt Supply vs Collateral Value')
        axs[1].set_ylabel('USD')
        axs[1].legend()

        axs[2].plot(self.time_history, self.unhealthy_history)
        axs[2].set_title('Unhealthy Accounts')
        axs[2].set_ylabel('Count')

        axs[3].plot(self.time_history, self.violation_history)
        axs[3].set_title('Invariant Violations')
        axs[3].set_ylabel('Count')
        axs[3].set_xlabel('Days')

        plt.tight_layout()
        plt.show()
        return fig
