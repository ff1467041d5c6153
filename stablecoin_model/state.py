"""
Mutable ledger state owned by the engine.

``EngineState`` is the single store of per-account collateral and minted debt.
It is created by the engine and handed to every component that reads or
writes it; nothing else holds account balances.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class Asset:
    """
    A supported collateral type.

    ``address`` is the identifier callers use, ``decimals`` the native unit
    scale of the token, ``price_feed`` its oracle and ``token`` the ledger the
    engine pulls deposits from and pays withdrawals out of.
    """
    address: str
    decimals: int
    price_feed: Any
    token: Any


@dataclass
class EngineState:
    collateral_deposited: Dict[str, Dict[str, int]] = field(default_factory=dict)  # account -> asset -> amount
    debt_minted: Dict[str, int] = field(default_factory=dict)                      # account -> debt units

    def snapshot(self):
        return (copy.deepcopy(self.collateral_deposited), dict(self.debt_minted))

    def restore(self, snapshot):
        collateral, debt = snapshot
        self.collateral_deposited = copy.deepcopy(collateral)
        self.debt_minted = dict(debt)

    def get_debt(self, account) -> int:
        return self.debt_minted.get(account, 0)

    def set_debt(self, account, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Debt must not be negative: {amount}")
        if amount == 0:
            self.debt_minted.pop(account, None)
        else:
            self.debt_minted[account] = amount

    def total_debt(self) -> int:
        return sum(self.debt_minted.values())

    def accounts(self):
        """Every account that holds collateral or debt, in first-seen order."""
        seen = dict.fromkeys(self.collateral_deposited)
        seen.update(dict.fromkeys(self.debt_minted))
        return list(seen)
