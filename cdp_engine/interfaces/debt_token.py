"""Debt token protocol: the external ledger of the minted token."""
from typing import Protocol


class DebtToken(Protocol):
    """Abstract interface for crediting, pulling and destroying debt tokens."""

    def mint(self, account: str, amount: int) -> bool: ...

    def burn(self, amount: int) -> None: ...

    def transfer_from(self, sender: str, recipient: str, amount: int) -> bool: ...

    def balance_of(self, account: str) -> int: ...
