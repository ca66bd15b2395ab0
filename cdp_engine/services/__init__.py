"""Engine components."""
from .collateral import CollateralOperations
from .debt import DebtOperations
from .guard import ReentrancyGuard
from .health import HealthFactorCalculator, calc_health_factor
from .liquidation import LiquidationEngine, LiquidationResult
from .operation import Operation, atomic, call_collaborator
from .position_ledger import PositionLedger
from .value_converter import ValueConverter

__all__ = [
    "CollateralOperations",
    "DebtOperations",
    "HealthFactorCalculator",
    "LiquidationEngine",
    "LiquidationResult",
    "Operation",
    "PositionLedger",
    "ReentrancyGuard",
    "ValueConverter",
    "atomic",
    "calc_health_factor",
    "call_collaborator",
]
