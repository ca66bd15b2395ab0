"""Collateral custody protocol: one ledger per collateral asset."""
from typing import Protocol


class CollateralCustody(Protocol):
    """Abstract interface for moving units of one collateral asset."""

    def transfer_from(self, sender: str, recipient: str, quantity: int) -> bool: ...

    def transfer(self, recipient: str, quantity: int) -> bool: ...

    def balance_of(self, account: str) -> int: ...
