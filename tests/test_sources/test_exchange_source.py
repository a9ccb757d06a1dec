"""Tests for ExchangeTickerClient and ExchangeTickerSource.

All tests use real ccxt exchange objects with network methods replaced
by AsyncMock to avoid real API calls.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from fxquotes.config import SourceSettings
from fxquotes.exceptions import SourceError
from fxquotes.exchange.client import ExchangeTickerClient
from fxquotes.sources.exchange import ExchangeTickerSource

MOCK_TICKER = {
    "symbol": "USDT/BRL",
    "bid": 5.441,
    "ask": 5.447,
    "last": 5.444,
}


@pytest.fixture
def client() -> ExchangeTickerClient:
    client = ExchangeTickerClient("binance")
    client._exchange.fetch_ticker = AsyncMock(return_value=MOCK_TICKER)
    client._exchange.close = AsyncMock()
    return client


class TestExchangeTickerClient:
    def test_standard_init(self) -> None:
        client = ExchangeTickerClient("binance")
        assert client.exchange.enableRateLimit is True
        assert client.exchange_id == "binance"

    def test_unknown_exchange_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown ccxt exchange"):
            ExchangeTickerClient("not-an-exchange")

    @pytest.mark.asyncio
    async def test_bid_ask_are_decimal(self, client: ExchangeTickerClient) -> None:
        bid, ask = await client.fetch_bid_ask("USDT/BRL")
        assert bid == Decimal("5.441")
        assert ask == Decimal("5.447")
        client._exchange.fetch_ticker.assert_awaited_once_with("USDT/BRL")

    @pytest.mark.asyncio
    async def test_missing_bid_raises(self, client: ExchangeTickerClient) -> None:
        client._exchange.fetch_ticker = AsyncMock(return_value={"bid": None, "ask": 5.4})
        with pytest.raises(SourceError, match="no bid/ask"):
            await client.fetch_bid_ask("USDT/BRL")

    @pytest.mark.asyncio
    async def test_close_calls_exchange_close(self, client: ExchangeTickerClient) -> None:
        await client.close()
        client._exchange.close.assert_awaited_once()


class TestExchangeTickerSource:
    @pytest.mark.asyncio
    async def test_buy_is_ask_sell_is_bid(self, client: ExchangeTickerClient) -> None:
        source = ExchangeTickerSource(client, SourceSettings())

        quote = await source.fetch()

        assert quote.buy_price == Decimal("5.4470")
        assert quote.sell_price == Decimal("5.4410")
        assert quote.source == "ccxt://binance/USDT/BRL"
        assert quote.metadata is not None
        assert quote.metadata.mid_market_rate == Decimal("5.4440")
        assert quote.metadata.currency_pair == "USDT/BRL"

    def test_identity_and_rules(self, client: ExchangeTickerClient) -> None:
        source = ExchangeTickerSource(client, SourceSettings())
        assert source.name == "Binance"
        assert source.rules.buy_exceeds_sell is True

    @pytest.mark.asyncio
    async def test_close_releases_client(self, client: ExchangeTickerClient) -> None:
        source = ExchangeTickerSource(client, SourceSettings())
        await source.close()
        client._exchange.close.assert_awaited_once()
