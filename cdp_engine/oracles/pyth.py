"""Pyth Network price source."""
from __future__ import annotations

import logging
import ssl

import aiohttp
import certifi

from ..config import PythConfig
from ..errors import PriceUnavailable
from ..models import FEED_DECIMALS, PriceQuote

logger = logging.getLogger(__name__)


def to_feed_decimals(price_raw: int, expo: int) -> int:
    """Rescale a Pyth ``price * 10**expo`` to FEED_DECIMALS decimals, truncating."""
    shift = expo + FEED_DECIMALS
    if shift >= 0:
        return price_raw * 10**shift
    scale = 10**-shift
    if price_raw < 0:
        return -(-price_raw // scale)
    return price_raw // scale


class PythPriceSource:
    """Price snapshot refreshed from Pyth Hermes.

    ``refresh()`` does the network I/O; ``latest_price()`` only reads the last
    snapshot, so the engine never waits on the network mid-operation. Wrap it
    in ``StalePriceGuard`` to reject quotes that were not refreshed in time.
    """

    def __init__(self, config: PythConfig) -> None:
        self.hermes_url = config.hermes_url
        self.price_feeds = dict(config.feeds)
        self._quotes: dict[str, PriceQuote] = {}

    def latest_price(self, feed_id: str) -> tuple[int, int]:
        quote = self._quotes.get(feed_id)
        if quote is None:
            raise PriceUnavailable(f"No Pyth quote for feed '{feed_id}'")
        return quote.price, quote.updated_at

    async def refresh(self, feeds: list[str] | None = None) -> dict[str, PriceQuote]:
        """Fetch current prices from Pyth Network into the snapshot.

        Args:
            feeds: Optional list of feed names to fetch. If None, fetches all
                   configured feeds.

        Returns the quotes received by this call. On HTTP or network errors
        nothing is updated and the previous snapshot stays in place.
        """
        received: dict[str, PriceQuote] = {}

        selected = self.price_feeds
        if feeds is not None:
            selected = {k: v for k, v in self.price_feeds.items() if k in feeds}

        feed_ids = list(set(selected.values()))
        if not feed_ids:
            return received

        query_params = "&".join([f"ids[]={fid}" for fid in feed_ids])
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return received

                    data = await response.json()
                    parsed = data.get("parsed", [])

                    # Reverse mapping from hex feed id to configured feed names
                    id_to_feeds: dict[str, list[str]] = {}
                    for name, hex_id in selected.items():
                        id_to_feeds.setdefault(hex_id.lower().removeprefix("0x"), []).append(name)

                    for item in parsed:
                        hex_id = str(item.get("id", "")).lower().removeprefix("0x")
                        price_data = item.get("price", {})
                        quote = PriceQuote(
                            price=to_feed_decimals(
                                int(price_data.get("price", 0)),
                                int(price_data.get("expo", 0)),
                            ),
                            updated_at=int(price_data.get("publish_time", 0)),
                        )
                        for name in id_to_feeds.get(hex_id, []):
                            received[name] = quote

        except (aiohttp.ClientError, ConnectionError, TimeoutError) as e:
            logger.error("Error fetching prices from Pyth: %s", e)
            return received

        self._quotes.update(received)
        logger.info("Fetched %d prices from Pyth Network", len(received))
        for name, quote in sorted(received.items()):
            logger.info("  %s: %d (published %d)", name, quote.price, quote.updated_at)
        return received
