"""Crypto exchange ticker client via ccxt async.

Wraps a ccxt.async_support exchange with proper initialization and async
cleanup. Only public market data is used, so no API keys are configured.
"""

from decimal import Decimal

import ccxt.async_support as ccxt_async

from fxquotes.exceptions import SourceError
from fxquotes.logging import get_logger

logger = get_logger(__name__)


class ExchangeTickerClient:
    """Reads best bid/ask for one symbol from a ccxt-supported exchange.

    Args:
        exchange_id: ccxt exchange id (e.g. "binance").
    """

    def __init__(self, exchange_id: str) -> None:
        exchange_class = getattr(ccxt_async, exchange_id, None)
        if exchange_class is None:
            raise ValueError(f"Unknown ccxt exchange id: {exchange_id}")

        self._exchange_id = exchange_id
        self._exchange = exchange_class({"enableRateLimit": True})

    @property
    def exchange(self) -> ccxt_async.Exchange:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    @property
    def exchange_id(self) -> str:
        return self._exchange_id

    async def fetch_bid_ask(self, symbol: str) -> tuple[Decimal, Decimal]:
        """Return (bid, ask) for a symbol.

        All numeric values are converted through Decimal(str(value)).

        Raises:
            SourceError: If the ticker has no bid or ask.
        """
        ticker = await self._exchange.fetch_ticker(symbol)
        bid = ticker.get("bid")
        ask = ticker.get("ask")
        if bid is None or ask is None:
            raise SourceError(
                f"{self._exchange_id} ticker for {symbol} has no bid/ask"
            )
        logger.debug("ticker_fetched", exchange=self._exchange_id, symbol=symbol)
        return Decimal(str(bid)), Decimal(str(ask))

    async def close(self) -> None:
        """Clean up ccxt async resources. CRITICAL: must be called to avoid resource leaks."""
        logger.info("closing_exchange_connection", exchange=self._exchange_id)
        await self._exchange.close()
