"""
Error types for the stablecoin engine model.

All engine errors derive from ``EngineError`` which is a ``ValueError``, so code
written against the older ``raise ValueError(...)`` style of the model keeps
working. The four families mirror how a failed operation is treated:

- ``ValidationError``: rejected before any state change
- ``SolvencyError``: rejected after a tentative state change, fully rolled back
- ``OracleError``: a price could not be trusted, nothing is applied
- ``ExternalCallError``: a collaborator call failed, fully rolled back
"""


class EngineError(ValueError):
    """Base class for every failure raised by the engine."""


# --- Validation ---

class ValidationError(EngineError):
    pass


class ZeroAmount(ValidationError):
    def __init__(self, what="amount"):
        self.what = what
        super().__init__(f"{what} must be more than zero")


class ZeroAddress(ValidationError):
    def __init__(self):
        super().__init__("Address must not be the zero address")


class UnsupportedAsset(ValidationError):
    def __init__(self, asset):
        self.asset = asset
        super().__init__(f"Asset not supported: {asset}")


class TokenAddressesAndPriceFeedAddressesMustBeSameLength(ValidationError):
    def __init__(self, n_assets, n_feeds):
        self.n_assets = n_assets
        self.n_feeds = n_feeds
        super().__init__(
            f"Token addresses and price feed addresses must be same length "
            f"({n_assets} assets, {n_feeds} feeds)"
        )


class BurnExceedsDebt(ValidationError):
    def __init__(self, amount, debt):
        self.amount = amount
        self.debt = debt
        super().__init__(f"Burn amount {amount} exceeds minted debt {debt}")


# --- Solvency ---

class SolvencyError(EngineError):
    pass


class BreaksHealthFactor(SolvencyError):
    def __init__(self, health_factor):
        self.health_factor = health_factor
        super().__init__(f"Health factor broken: {health_factor}")


class HealthFactorOk(SolvencyError):
    def __init__(self, health_factor):
        self.health_factor = health_factor
        super().__init__(f"Health factor is ok, cannot liquidate: {health_factor}")


class HealthFactorNotImproved(SolvencyError):
    def __init__(self, starting, ending):
        self.starting = starting
        self.ending = ending
        super().__init__(f"Health factor not improved: {starting} -> {ending}")


class InsufficientCollateral(SolvencyError):
    def __init__(self, asset, requested, available):
        self.asset = asset
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient collateral of {asset}: requested {requested}, available {available}"
        )


class InsufficientCollateralToLiquidate(SolvencyError):
    def __init__(self, asset, required, available):
        self.asset = asset
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient collateral of {asset} to liquidate: required {required}, available {available}"
        )


# --- Oracle ---

class OracleError(EngineError):
    pass


class StalePrice(OracleError):
    def __init__(self, asset, updated_at, now):
        self.asset = asset
        self.updated_at = updated_at
        self.now = now
        super().__init__(f"Stale price for {asset}: updated at {updated_at}, now {now}")


class InvalidPrice(OracleError):
    def __init__(self, asset, price):
        self.asset = asset
        self.price = price
        super().__init__(f"Invalid price for {asset}: {price}")


# --- External calls ---

class ExternalCallError(EngineError):
    pass


class TransferFailed(ExternalCallError):
    def __init__(self, asset, sender, recipient, amount):
        self.asset = asset
        self.sender = sender
        self.recipient = recipient
        self.amount = amount
        super().__init__(f"Transfer of {amount} {asset} from {sender} to {recipient} failed")


class ReentrantCall(ExternalCallError):
    def __init__(self):
        super().__init__("Reentrant call into the engine")


# --- Collaborator ledgers ---

class TokenError(ValueError):
    """Raised by the in-memory token ledgers."""


class InsufficientBalance(TokenError):
    def __init__(self, account, amount, balance):
        self.account = account
        self.amount = amount
        self.balance = balance
        super().__init__(f"Insufficient balance for {account}: {amount} > {balance}")


class InsufficientAllowance(TokenError):
    def __init__(self, owner, spender, amount, allowance):
        self.owner = owner
        self.spender = spender
        self.amount = amount
        self.allowance = allowance
        super().__init__(
            f"Insufficient allowance from {owner} to {spender}: {amount} > {allowance}"
        )


class NotOwner(TokenError):
    def __init__(self, caller):
        self.caller = caller
        super().__init__(f"Caller is not the owner: {caller}")


class InvariantViolation(AssertionError):
    """Raised by ``assert_protocol_invariants`` when a protocol invariant fails."""

    def __init__(self, violations):
        self.violations = list(violations)
        super().__init__(f"invariant violations: {', '.join(self.violations)}")
