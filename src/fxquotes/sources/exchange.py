"""Crypto exchange order-book source (USDT/BRL by default).

USDT tracks USD closely enough that the best ask and bid on a BRL market
serve as buy and sell prices for one dollar: buy_price = ask,
sell_price = bid, so buy_price > sell_price.
"""

from fxquotes.config import SourceSettings
from fxquotes.exchange.client import ExchangeTickerClient
from fxquotes.models import Quote, QuoteMetadata, ValidationRules, utc_now
from fxquotes.sources.base import SourceAdapter, round_price


class ExchangeTickerSource(SourceAdapter):
    """Quotes USD/BRL from a crypto exchange's stablecoin order book."""

    def __init__(self, client: ExchangeTickerClient, settings: SourceSettings) -> None:
        self._client = client
        self._symbol = settings.exchange_symbol
        self.name = client.exchange_id.capitalize()
        self.source = f"ccxt://{client.exchange_id}/{self._symbol}"
        self.rules = ValidationRules(
            min_rate=settings.brl_per_usd_min,
            max_rate=settings.brl_per_usd_max,
            buy_exceeds_sell=True,
        )

    async def fetch(self) -> Quote:
        bid, ask = await self._client.fetch_bid_ask(self._symbol)
        mid = (bid + ask) / 2
        spread_pct = (ask - bid) / mid * 100 if mid > 0 else None

        return Quote(
            buy_price=round_price(ask),
            sell_price=round_price(bid),
            source=self.source,
            timestamp=utc_now(),
            metadata=QuoteMetadata(
                mid_market_rate=round_price(mid),
                spread_percentage=round_price(spread_pct) if spread_pct is not None else None,
                currency_pair=self._symbol,
                provider=self.name,
                note="Stablecoin order book best bid/ask",
            ),
        )

    async def close(self) -> None:
        await self._client.close()
