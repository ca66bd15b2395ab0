"""Collateral quantity <-> value unit conversion using the price source."""
from __future__ import annotations

import logging

from ..errors import AssetNotAllowed, PriceUnavailable
from ..interfaces.price_source import PriceSource
from ..models import AssetRegistry, EngineConstants

logger = logging.getLogger(__name__)


class ValueConverter:
    """Stateless converter between asset quantities and value units.

    Both directions truncate toward zero:

        value    = quantity * price * additional_feed_precision // precision
        quantity = value * precision // (price * additional_feed_precision)
    """

    def __init__(
        self,
        registry: AssetRegistry,
        price_source: PriceSource,
        constants: EngineConstants,
    ) -> None:
        self._registry = registry
        self._source = price_source
        self._constants = constants

    def price_of(self, asset: str) -> int:
        """Latest positive feed price for a registered asset."""
        if asset not in self._registry:
            raise AssetNotAllowed(asset)
        feed_id = self._registry.price_feed_of(asset)
        price, updated_at = self._source.latest_price(feed_id)
        if price <= 0:
            raise PriceUnavailable(
                f"Feed '{feed_id}' returned non-positive price {price} "
                f"(updated at {updated_at})"
            )
        logger.debug("Price %s via %s: %d (updated at %d)", asset, feed_id, price, updated_at)
        return price

    def value_of(self, asset: str, quantity: int) -> int:
        price = self.price_of(asset)
        c = self._constants
        return quantity * price * c.additional_feed_precision // c.precision

    def quantity_from_value(self, asset: str, value: int) -> int:
        price = self.price_of(asset)
        c = self._constants
        return value * c.precision // (price * c.additional_feed_precision)
