"""Source adapters -- one per external quote provider -- and their shared resources."""

from fxquotes.config import AppSettings
from fxquotes.exchange.client import ExchangeTickerClient
from fxquotes.logging import get_logger
from fxquotes.sources.base import SourceAdapter, round_price
from fxquotes.sources.exchange import ExchangeTickerSource
from fxquotes.sources.nomad import NomadSource
from fxquotes.sources.nubank import NubankSource
from fxquotes.sources.resources import BrowserResource, HttpResource
from fxquotes.sources.wise import WiseSource

logger = get_logger(__name__)

KNOWN_SOURCES = ("wise", "nubank", "nomad", "exchange")


def build_sources(
    settings: AppSettings,
    browser: BrowserResource,
    http: HttpResource,
) -> list[SourceAdapter]:
    """Instantiate the adapters listed in settings.sources.enabled, in order.

    Raises:
        ValueError: If an enabled name is not a known source.
    """
    sources: list[SourceAdapter] = []
    for key in settings.sources.enabled:
        key = key.strip().lower()
        if key == "wise":
            sources.append(WiseSource(browser, settings.sources, settings.browser))
        elif key == "nubank":
            sources.append(NubankSource(browser, settings.sources, settings.browser))
        elif key == "nomad":
            sources.append(NomadSource(http, settings.sources))
        elif key == "exchange":
            client = ExchangeTickerClient(settings.sources.exchange_id)
            sources.append(ExchangeTickerSource(client, settings.sources))
        else:
            raise ValueError(
                f"Unknown source {key!r}; expected one of {', '.join(KNOWN_SOURCES)}"
            )

    logger.info("sources_configured", sources=[s.name for s in sources])
    return sources


__all__ = [
    "KNOWN_SOURCES",
    "BrowserResource",
    "ExchangeTickerSource",
    "HttpResource",
    "NomadSource",
    "NubankSource",
    "SourceAdapter",
    "WiseSource",
    "build_sources",
    "round_price",
]
