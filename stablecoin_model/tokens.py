"""
Token Models for the stablecoin engine.

This module simulates the two kinds of fungible ledgers the engine talks to:
collateral tokens (plain ERC20-style balances) and the debt token, the
USD-pegged stablecoin whose mint and burn are reserved for its owner (the engine).
"""

import copy

from .errors import InsufficientAllowance, InsufficientBalance, NotOwner, ZeroAddress, ZeroAmount

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class Erc20Token:
    """
    Simulates a standard fungible token contract.
    """

    def __init__(self, symbol, decimals=18, address=None):
        self.symbol = symbol
        self.decimals = decimals
        self.address = address or symbol

        # Total token supply
        self.total_supply = 0

        # Mapping of addresses to token balances
        self.balances = {}

        # Mapping of owner -> spender -> remaining allowance
        self.allowances = {}

    def balance_of(self, account):
        """Returns the token balance of the given account."""
        return self.balances.get(account, 0)

    def allowance(self, owner, spender):
        return self.allowances.get(owner, {}).get(spender, 0)

    def approve(self, owner, spender, amount):
        """Sets the amount ``spender`` may move out of ``owner``'s balance."""
        if amount < 0:
            raise ValueError("Allowance must not be negative")
        self.allowances.setdefault(owner, {})[spender] = amount
        return True

    def transfer(self, sender, recipient, amount):
        """
        Transfers tokens from sender to recipient.

        Args:
            sender: Address sending the tokens
            recipient: Address receiving the tokens
            amount: Amount of tokens to transfer

        Returns:
            True if successful
        """
        if amount <= 0:
            raise ZeroAmount()

        sender_balance = self.balances.get(sender, 0)
        if sender_balance < amount:
            raise InsufficientBalance(sender, amount, sender_balance)

        self.balances[sender] = sender_balance - amount
        self.balances[recipient] = self.balances.get(recipient, 0) + amount

        return True

    def transfer_from(self, spender, owner, recipient, amount):
        """
        Moves tokens out of ``owner``'s balance on behalf of ``spender``.

        The spender must hold a sufficient allowance, which is consumed.
        """
        current = self.allowance(owner, spender)
        if current < amount:
            raise InsufficientAllowance(owner, spender, amount, current)

        self.transfer(owner, recipient, amount)
        self.allowances[owner][spender] = current - amount

        return True

    def mint(self, recipient, amount):
        """Faucet mint used to fund test and simulation accounts."""
        if amount <= 0:
            raise ZeroAmount()

        self.balances[recipient] = self.balances.get(recipient, 0) + amount
        self.total_supply += amount

        return True

    def snapshot(self):
        """Captures the ledger so a failed engine operation can undo its effects."""
        return (self.total_supply, copy.deepcopy(self.balances), copy.deepcopy(self.allowances))

    def restore(self, snapshot):
        self.total_supply, balances, allowances = snapshot
        self.balances = copy.deepcopy(balances)
        self.allowances = copy.deepcopy(allowances)


class DebtToken(Erc20Token):
    """
    Simulates the stablecoin contract.

    Minting and burning are only callable by the owner, which is the engine
    once deployment has transferred ownership to it.
    """

    def __init__(self, symbol="DSC", owner=None, address=None):
        super().__init__(symbol, decimals=18, address=address)

        # Owner of the contract
        self.owner = owner

    def transfer_ownership(self, caller, new_owner):
        """Hands the mint/burn capability to ``new_owner``."""
        self._only_owner(caller)
        if not new_owner or new_owner == ZERO_ADDRESS:
            raise ZeroAddress()
        self.owner = new_owner

    def mint(self, caller, recipient, amount):
        """
        Mints new tokens to the recipient account.
        Only callable by the owner.

        Args:
            caller: Address requesting the mint
            recipient: Address receiving the minted tokens
            amount: Amount of tokens to mint

        Returns:
            True if successful
        """
        self._only_owner(caller)
        if not recipient or recipient == ZERO_ADDRESS:
            raise ZeroAddress()
        return super().mint(recipient, amount)

    def burn(self, caller, from_account, amount):
        """
        Burns tokens from the given account.
        Only callable by the owner.

        Args:
            caller: Address requesting the burn
            from_account: Address to burn tokens from
            amount: Amount of tokens to burn

        Returns:
            True if successful
        """
        self._only_owner(caller)
        if amount <= 0:
            raise ZeroAmount()

        from_balance = self.balances.get(from_account, 0)
        if from_balance < amount:
            raise InsufficientBalance(from_account, amount, from_balance)

        self.balances[from_account] = from_balance - amount
        self.total_supply -= amount

        return True

    def _only_owner(self, caller):
        if self.owner is None or caller != self.owner:
            raise NotOwner(caller)
