"""Multi-asset collateralized debt engine."""
from .engine import ENGINE_ACCOUNT, CollateralEngine
from .models import AccountInformation, EngineConstants

__all__ = ["ENGINE_ACCOUNT", "AccountInformation", "CollateralEngine", "EngineConstants"]
