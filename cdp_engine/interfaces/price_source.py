"""Price source protocol: price feed abstraction."""
from typing import Protocol


class PriceSource(Protocol):
    """Abstract interface for reading the latest price of a feed.

    Implementations own the staleness policy and must raise
    ``PriceUnavailable`` instead of returning data they consider stale.
    """

    def latest_price(self, feed_id: str) -> tuple[int, int]: ...
