"""
Events recorded by the engine.

The engine appends one ``EngineEvent`` per effect so simulations and tests can
follow what happened. Events of a rolled-back operation are discarded with the
rest of its effects.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class Operation(Enum):
    """
    Kinds of effects an engine operation can produce.
    """
    COLLATERAL_DEPOSITED = 0   # Collateral moved into engine custody
    COLLATERAL_REDEEMED = 1    # Collateral moved out of engine custody
    DEBT_MINTED = 2            # Debt tokens minted against an account
    DEBT_BURNED = 3            # Debt repaid and tokens destroyed
    LIQUIDATED = 4             # An unhealthy account was liquidated


@dataclass(frozen=True)
class EngineEvent:
    operation: Operation
    account: str                    # Account whose position changed
    asset: Optional[str] = None     # Collateral asset involved, if any
    amount: int = 0                 # Collateral units or debt units
    counterparty: Optional[str] = None  # Recipient of redeemed collateral / payer of burned debt
    details: Dict[str, int] = field(default_factory=dict)
