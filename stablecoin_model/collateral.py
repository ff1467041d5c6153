"""
Collateral accounting.

Per-account, per-asset record of deposited collateral, held in the engine's
``EngineState``. Token movements are not done here; the engine issues them
after the ledger has been updated.
"""

from typing import Dict, List

from .errors import InsufficientCollateral, UnsupportedAsset, ZeroAmount
from .state import Asset, EngineState
from .valuation import Valuation


class CollateralAccounting:
    def __init__(self, state: EngineState, assets: Dict[str, Asset], valuation: Valuation):
        self.state = state
        self.assets = assets
        self.valuation = valuation

    def require_supported(self, asset):
        if asset not in self.assets:
            raise UnsupportedAsset(asset)

    def balance_of(self, account, asset) -> int:
        return self.state.collateral_deposited.get(account, {}).get(asset, 0)

    def credit(self, account, asset, amount: int) -> int:
        """Adds ``amount`` to the account's balance of ``asset``; returns the new balance."""
        if amount <= 0:
            raise ZeroAmount()
        self.require_supported(asset)
        balances = self.state.collateral_deposited.setdefault(account, {})
        balances[asset] = balances.get(asset, 0) + amount
        return balances[asset]

    def debit(self, account, asset, amount: int) -> int:
        """Removes ``amount`` from the account's balance of ``asset``; returns the new balance."""
        if amount <= 0:
            raise ZeroAmount()
        self.require_supported(asset)
        available = self.balance_of(account, asset)
        if available < amount:
            raise InsufficientCollateral(asset, amount, available)
        self.state.collateral_deposited[account][asset] = available - amount
        return available - amount

    def account_collateral_value_usd(self, account) -> int:
        """
        Sum of the USD value of every asset the account holds.

        Assets with a zero balance are skipped, so only the feeds of assets the
        account actually holds can make this fail.
        """
        total = 0
        for asset in self.assets:
            amount = self.balance_of(account, asset)
            if amount:
                total += self.valuation.usd_value(asset, amount)
        return total

    def accounts(self) -> List[str]:
        return list(self.state.collateral_deposited)

    def total_collateral(self, asset) -> int:
        """Amount of ``asset`` recorded across all accounts."""
        return sum(balances.get(asset, 0) for balances in self.state.collateral_deposited.values())

    def total_collateral_value_usd(self) -> int:
        total = 0
        for asset in self.assets:
            amount = self.total_collateral(asset)
            if amount:
                total += self.valuation.usd_value(asset, amount)
        return total
