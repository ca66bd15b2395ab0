"""Data models, all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass

PRECISION = 10**18
FEED_DECIMALS = 8
ADDITIONAL_FEED_PRECISION = 10 ** (18 - FEED_DECIMALS)
LIQUIDATION_PRECISION = 100
MAX_HEALTH_FACTOR = 2**256 - 1


@dataclass(frozen=True)
class EngineConstants:
    """Fixed-point parameters shared by every component of one engine."""

    liquidation_threshold: int = 50
    liquidation_bonus: int = 10
    liquidation_precision: int = LIQUIDATION_PRECISION
    precision: int = PRECISION
    additional_feed_precision: int = ADDITIONAL_FEED_PRECISION

    @property
    def min_health_factor(self) -> int:
        return self.precision

    @property
    def max_health_factor(self) -> int:
        return MAX_HEALTH_FACTOR


@dataclass(frozen=True)
class AssetRegistry:
    """Approved collateral assets, in registration order, with their price feeds."""

    assets: tuple[str, ...] = ()
    price_feeds: tuple[str, ...] = ()

    def __contains__(self, asset: object) -> bool:
        return asset in self.assets

    def price_feed_of(self, asset: str) -> str:
        return self.price_feeds[self.assets.index(asset)]


@dataclass(frozen=True)
class PriceQuote:
    """Price with FEED_DECIMALS decimals and the unix time it was published."""

    price: int
    updated_at: int


@dataclass(frozen=True)
class AccountInformation:
    """Recorded debt and current collateral value of one account."""

    debt: int
    collateral_value: int
