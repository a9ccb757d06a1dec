"""Exchange client layer -- public ticker data via ccxt."""

from fxquotes.exchange.client import ExchangeTickerClient

__all__ = ["ExchangeTickerClient"]
