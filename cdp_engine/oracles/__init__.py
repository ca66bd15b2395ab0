"""Price source implementations."""
from .pyth import PythPriceSource
from .staleness import StalePriceGuard
from .static import StaticPriceSource

__all__ = ["PythPriceSource", "StalePriceGuard", "StaticPriceSource"]
