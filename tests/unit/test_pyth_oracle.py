"""Unit tests for the Pyth price source: response parsing, snapshot and errors."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from cdp_engine.config import PythConfig
from cdp_engine.errors import PriceUnavailable
from cdp_engine.models import PriceQuote
from cdp_engine.oracles.pyth import PythPriceSource, to_feed_decimals


@pytest.fixture()
def source() -> PythPriceSource:
    return PythPriceSource(
        PythConfig(
            hermes_url="https://hermes.example.com/v2/updates/price/latest",
            feeds={"ETH_USD": "aaa111", "BTC_USD": "0xbbb222"},
        )
    )


def _make_pyth_response(items: list[dict]) -> dict:
    return {"parsed": items}


def _mock_session(status: int = 200, data: dict | None = None) -> AsyncMock:
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=data or {})
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    mock_session.get = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


ETH_ITEM = {
    "id": "aaa111",
    "price": {"price": "200000000000", "expo": -8, "publish_time": 1_700_000_000},
}
BTC_ITEM = {
    "id": "bbb222",
    "price": {"price": "6500000", "expo": -2, "publish_time": 1_700_000_005},
}


class TestToFeedDecimals:
    def test_same_exponent(self) -> None:
        assert to_feed_decimals(200_000_000_000, -8) == 200_000_000_000

    def test_fewer_decimals_scales_up(self) -> None:
        assert to_feed_decimals(6_500_000, -2) == 65_000 * 10**8

    def test_more_decimals_truncates(self) -> None:
        assert to_feed_decimals(123_456_789_999, -10) == 1_234_567_899

    def test_negative_truncates_toward_zero(self) -> None:
        assert to_feed_decimals(-199, -10) == -1


class TestPythRefresh:
    @pytest.mark.asyncio
    async def test_parses_response_correctly(self, source: PythPriceSource) -> None:
        session = _mock_session(data=_make_pyth_response([ETH_ITEM, BTC_ITEM]))

        with patch("cdp_engine.oracles.pyth.aiohttp.ClientSession", return_value=session):
            with patch("cdp_engine.oracles.pyth.aiohttp.TCPConnector"):
                received = await source.refresh()

        assert received["ETH_USD"] == PriceQuote(2000 * 10**8, 1_700_000_000)
        assert received["BTC_USD"] == PriceQuote(65_000 * 10**8, 1_700_000_005)
        assert source.latest_price("ETH_USD") == (2000 * 10**8, 1_700_000_000)

    @pytest.mark.asyncio
    async def test_http_error_keeps_previous_snapshot(self, source: PythPriceSource) -> None:
        ok = _mock_session(data=_make_pyth_response([ETH_ITEM]))
        with patch("cdp_engine.oracles.pyth.aiohttp.ClientSession", return_value=ok):
            with patch("cdp_engine.oracles.pyth.aiohttp.TCPConnector"):
                await source.refresh()

        failing = _mock_session(status=500)
        with patch("cdp_engine.oracles.pyth.aiohttp.ClientSession", return_value=failing):
            with patch("cdp_engine.oracles.pyth.aiohttp.TCPConnector"):
                received = await source.refresh()

        assert received == {}
        assert source.latest_price("ETH_USD") == (2000 * 10**8, 1_700_000_000)

    @pytest.mark.asyncio
    async def test_handles_network_error(self, source: PythPriceSource) -> None:
        mock_session = AsyncMock()
        mock_session.get = MagicMock(side_effect=ConnectionError("timeout"))
        mock_session.__aenter__ = AsyncMock(return_value=mock_session)
        mock_session.__aexit__ = AsyncMock(return_value=None)

        with patch("cdp_engine.oracles.pyth.aiohttp.ClientSession", return_value=mock_session):
            with patch("cdp_engine.oracles.pyth.aiohttp.TCPConnector"):
                received = await source.refresh()

        assert received == {}
        with pytest.raises(PriceUnavailable):
            source.latest_price("ETH_USD")

    @pytest.mark.asyncio
    async def test_feed_filter(self, source: PythPriceSource) -> None:
        session = _mock_session(data=_make_pyth_response([ETH_ITEM]))

        with patch("cdp_engine.oracles.pyth.aiohttp.ClientSession", return_value=session):
            with patch("cdp_engine.oracles.pyth.aiohttp.TCPConnector"):
                received = await source.refresh(feeds=["ETH_USD"])

        assert "ETH_USD" in received
        assert "BTC_USD" not in received
        url = session.get.call_args[0][0]
        assert "aaa111" in url
        assert "bbb222" not in url

    @pytest.mark.asyncio
    async def test_empty_feeds_returns_empty(self) -> None:
        source = PythPriceSource(PythConfig(hermes_url="https://x.com", feeds={}))
        assert await source.refresh() == {}
