"""In-memory token ledgers for wiring the engine without a chain."""
from __future__ import annotations

import logging
from collections import defaultdict

from ..engine import ENGINE_ACCOUNT

logger = logging.getLogger(__name__)


class InMemoryToken:
    """Fungible balances with just the moves the engine needs.

    ``holder`` is the account whose balance ``transfer`` and ``burn`` draw
    from, i.e. the engine itself. Refused moves return False and change
    nothing.
    """

    def __init__(self, symbol: str, holder: str = ENGINE_ACCOUNT) -> None:
        self.symbol = symbol
        self.holder = holder
        self._balances: dict[str, int] = defaultdict(int)

    @property
    def total_supply(self) -> int:
        return sum(self._balances.values())

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def credit(self, account: str, amount: int) -> None:
        """Faucet: create ``amount`` out of nothing for ``account``."""
        if amount < 0:
            raise ValueError("amount must be non-negative")
        self._balances[account] += amount

    def transfer_from(self, sender: str, recipient: str, amount: int) -> bool:
        if amount < 0 or self.balance_of(sender) < amount:
            logger.debug(
                "%s transfer of %d from %s refused (balance %d)",
                self.symbol,
                amount,
                sender,
                self.balance_of(sender),
            )
            return False
        self._balances[sender] -= amount
        self._balances[recipient] += amount
        return True

    def transfer(self, recipient: str, amount: int) -> bool:
        return self.transfer_from(self.holder, recipient, amount)


class InMemoryCollateral(InMemoryToken):
    """Custody ledger of one collateral asset."""


class InMemoryDebtToken(InMemoryToken):
    """Debt token ledger; supply changes only through mint and burn."""

    def mint(self, account: str, amount: int) -> bool:
        if amount <= 0:
            return False
        self._balances[account] += amount
        return True

    def burn(self, amount: int) -> None:
        if amount <= 0:
            raise ValueError("burn amount must be positive")
        if self.balance_of(self.holder) < amount:
            raise ValueError(
                f"burn of {amount} exceeds {self.holder} balance {self.balance_of(self.holder)}"
            )
        self._balances[self.holder] -= amount
