"""Staleness policy for price sources."""
from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..errors import PriceUnavailable
from ..interfaces.price_source import PriceSource

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_SECONDS = 3 * 60 * 60


class StalePriceGuard:
    """Wrap a price source and refuse quotes older than ``max_age_seconds``.

    A stale or non-positive quote raises PriceUnavailable; there is no
    fallback price.
    """

    def __init__(
        self,
        source: PriceSource,
        max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if max_age_seconds <= 0:
            raise ValueError("max_age_seconds must be positive")
        self._source = source
        self._max_age = max_age_seconds
        self._clock = clock or time.time

    def latest_price(self, feed_id: str) -> tuple[int, int]:
        price, updated_at = self._source.latest_price(feed_id)
        age = int(self._clock()) - updated_at
        if age > self._max_age:
            logger.warning("Stale price for %s: %ds old", feed_id, age)
            raise PriceUnavailable(
                f"Price for '{feed_id}' is {age}s old (max {self._max_age}s)"
            )
        if price <= 0:
            raise PriceUnavailable(f"Non-positive price {price} for '{feed_id}'")
        return price, updated_at
