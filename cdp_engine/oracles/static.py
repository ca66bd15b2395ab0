"""Hand-set price source for scenario runs and tests."""
from __future__ import annotations

import time
from collections.abc import Callable

from ..errors import PriceUnavailable
from ..models import PriceQuote


class StaticPriceSource:
    """Prices with FEED_DECIMALS decimals, set explicitly per feed."""

    def __init__(
        self,
        prices: dict[str, int] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._clock = clock
        self._quotes: dict[str, PriceQuote] = {}
        for feed_id, price in (prices or {}).items():
            self.set_price(feed_id, price)

    def set_price(self, feed_id: str, price: int, updated_at: int | None = None) -> None:
        if updated_at is None:
            updated_at = int(self._clock())
        self._quotes[feed_id] = PriceQuote(price=price, updated_at=updated_at)

    def latest_price(self, feed_id: str) -> tuple[int, int]:
        quote = self._quotes.get(feed_id)
        if quote is None:
            raise PriceUnavailable(f"No price set for feed '{feed_id}'")
        return quote.price, quote.updated_at
