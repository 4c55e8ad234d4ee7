"""
Reward Token Model for the staking ledger.

This module simulates the fungible token that is both staked and paid out as
reward. It is the ledger's asset transfer gateway: transfers either move the
full amount or nothing at all, and report the outcome as a boolean instead of
raising, the way an ERC-20 `transfer` returns `false`.
"""

import logging

logger = logging.getLogger(__name__)


class RewardToken:
    """
    Simulates a fungible token with balances and allowances.
    """

    def __init__(self, symbol="STK", decimals=18):
        self.symbol = symbol
        self.decimals = decimals

        # Total token supply
        self.total_supply = 0

        # Mapping of addresses to token balances
        self.balances = {}

        # Mapping of (owner, spender) to remaining allowance
        self.allowances = {}

    def balance_of(self, account):
        """Returns the token balance of the given account."""
        return self.balances.get(account, 0)

    def allowance(self, owner, spender):
        """Returns how much `spender` may still pull from `owner`."""
        return self.allowances.get((owner, spender), 0)

    def approve(self, owner, spender, amount):
        """
        Lets `spender` pull up to `amount` tokens from `owner`.

        Returns:
            True if successful
        """
        if amount < 0:
            raise ValueError("Allowance cannot be negative")
        self.allowances[(owner, spender)] = amount
        return True

    def mint(self, recipient, amount):
        """
        Mints new tokens to the recipient account.

        Args:
            recipient: Address receiving the minted tokens
            amount: Amount of tokens to mint

        Returns:
            True if successful
        """
        if amount <= 0:
            raise ValueError("Amount must be greater than zero")

        self.balances[recipient] = self.balances.get(recipient, 0) + amount
        self.total_supply += amount

        return True

    def transfer(self, sender, recipient, amount):
        """
        Transfers tokens from sender to recipient.

        Args:
            sender: Address sending the tokens
            recipient: Address receiving the tokens
            amount: Amount of tokens to transfer

        Returns:
            True if the full amount moved, False if nothing moved
        """
        if amount < 0:
            return False

        sender_balance = self.balances.get(sender, 0)
        if sender_balance < amount:
            logger.debug("%s transfer of %s from %s refused: balance %s",
                         self.symbol, amount, sender, sender_balance)
            return False

        self.balances[sender] = sender_balance - amount
        self.balances[recipient] = self.balances.get(recipient, 0) + amount

        return True

    def transfer_from(self, spender, sender, recipient, amount):
        """
        Transfers tokens from sender to recipient on behalf of spender.

        Consumes `amount` of the allowance `sender` granted to `spender`.

        Returns:
            True if the full amount moved, False if nothing moved
        """
        allowed = self.allowance(sender, spender)
        if allowed < amount:
            logger.debug("%s transfer_from of %s by %s refused: allowance %s",
                         self.symbol, amount, spender, allowed)
            return False

        if not self.transfer(sender, recipient, amount):
            return False

        self.allowances[(sender, spender)] = allowed - amount
        return True

    def snapshot(self):
        """Captures balances, allowances and supply so a failed call can be undone."""
        return (dict(self.balances), dict(self.allowances), self.total_supply)

    def restore(self, state):
        """Rolls the token back to a state returned by snapshot()."""
        balances, allowances, total_supply = state
        self.balances = dict(balances)
        self.allowances = dict(allowances)
        self.total_supply = total_supply
