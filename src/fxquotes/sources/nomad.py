"""Nomad Global calculator API source.

The calculator endpoint returns the base USD/BRL rate together with the
spread and IOF tax Nomad applies:

    {"rate": {"value": "5.40"},
     "iof": {"banking": "0.011"},
     "spread": {"default": "0.02", "custom": "0.01"}}

Buying USD pays base * (1 + spread.default + iof.banking); selling USD
receives base * (1 - spread.custom).
"""

from typing import Any

from fxquotes.config import SourceSettings
from fxquotes.exceptions import SourceError
from fxquotes.models import Quote, QuoteMetadata, ValidationRules, utc_now
from fxquotes.sources.base import SourceAdapter, round_price, to_decimal
from fxquotes.sources.resources import HttpResource

NOMAD_SITE = "https://www.nomadglobal.com"

_HEADERS = {
    "accept": "*/*",
    "origin": "https://site.nomadglobal.com",
    "referer": "https://site.nomadglobal.com/",
    "user-agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
}


def quote_from_calculator(payload: dict[str, Any], source: str = NOMAD_SITE) -> Quote:
    """Build a quote from a calculator API response.

    Raises:
        SourceError: If a required field is missing or not numeric.
    """
    try:
        base_rate = to_decimal(payload["rate"]["value"])
        iof_banking = to_decimal(payload["iof"]["banking"])
        spread_default = to_decimal(payload["spread"]["default"])
        spread_custom = to_decimal(payload["spread"]["custom"])
    except (KeyError, TypeError) as exc:
        raise SourceError(f"Unexpected Nomad response shape: missing {exc}") from exc

    return Quote(
        buy_price=round_price(base_rate * (1 + spread_default + iof_banking)),
        sell_price=round_price(base_rate * (1 - spread_custom)),
        source=source,
        timestamp=utc_now(),
        metadata=QuoteMetadata(
            mid_market_rate=base_rate,
            spread_percentage=spread_default * 100,
            currency_pair="USD/BRL",
            provider="Nomad Global",
            note="Includes IOF tax and spread",
        ),
    )


class NomadSource(SourceAdapter):
    """Fetches Nomad's USD/BRL rate from its public calculator endpoint."""

    name = "Nomad"

    def __init__(self, http: HttpResource, settings: SourceSettings) -> None:
        self._http = http
        self._api_url = settings.nomad_url
        self.source = NOMAD_SITE
        self.rules = ValidationRules(
            min_rate=settings.brl_per_usd_min,
            max_rate=settings.brl_per_usd_max,
            buy_exceeds_sell=True,
        )

    async def fetch(self) -> Quote:
        session = await self._http.acquire()
        async with session.get(self._api_url, headers=_HEADERS) as response:
            response.raise_for_status()
            payload = await response.json(content_type=None)

        if not isinstance(payload, dict):
            raise SourceError(f"Unexpected Nomad response type: {type(payload).__name__}")
        return quote_from_calculator(payload, source=self.source)
