"""Reference token ledgers."""
from .memory import InMemoryCollateral, InMemoryDebtToken, InMemoryToken

__all__ = ["InMemoryCollateral", "InMemoryDebtToken", "InMemoryToken"]
