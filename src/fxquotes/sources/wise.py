"""Wise currency-converter page scraper.

Reads the mid-market rate from the USD -> BRL converter page and applies
Wise's typical spread on either side of it.

CONVENTION: prices are BRL per 1 USD. Buying USD costs more BRL than
selling it returns, so buy_price > sell_price.
"""

import re
from decimal import Decimal

from fxquotes.config import BrowserSettings, SourceSettings
from fxquotes.exceptions import SourceError
from fxquotes.models import Quote, QuoteMetadata, ValidationRules, utc_now
from fxquotes.sources.base import SourceAdapter, round_price, to_decimal
from fxquotes.sources.resources import BrowserResource

_RATE_PATTERN = re.compile(r"=\s*([\d.,]+)\s*BRL", re.IGNORECASE)

# Resolves once the converter has rendered a "1 USD = x BRL" line
_RATE_READY_JS = """
() => {
    const text = document.body.innerText;
    return text.includes('USD') && text.includes('BRL') && text.includes('=');
}
"""

# Three lookup strategies, most specific first; returns the element text or null
_RATE_TEXT_JS = """
() => {
    const matches = (text) => text.includes('USD') && text.includes('BRL') && text.includes('=');

    let element = document.querySelector('[class*="midMarketRate"] span[dir="ltr"]');

    if (!element) {
        for (const span of document.querySelectorAll('span[dir="ltr"]')) {
            if (matches(span.textContent || '')) {
                element = span;
                break;
            }
        }
    }

    if (!element) {
        const walker = document.createTreeWalker(document.body, NodeFilter.SHOW_TEXT, null);
        let node;
        while ((node = walker.nextNode())) {
            if (matches(node.textContent || '')) {
                element = node.parentElement;
                break;
            }
        }
    }

    return element ? (element.textContent || '').trim() : null;
}
"""


def parse_wise_rate(raw_text: str) -> Decimal:
    """Extract the BRL amount from text like "$1 USD = 5,385 BRL".

    The Spanish-locale page uses a comma as the decimal separator.

    Raises:
        SourceError: If no rate can be parsed or it is not positive.
    """
    match = _RATE_PATTERN.search(raw_text)
    if not match:
        raise SourceError(f'Could not parse rate from text: "{raw_text}"')

    rate = to_decimal(match.group(1).replace(",", ".", 1))
    if rate <= 0:
        raise SourceError(f"Invalid rate value: {rate}")
    return rate


class WiseSource(SourceAdapter):
    """Scrapes the Wise USD/BRL mid-market rate via the shared browser."""

    name = "Wise"

    def __init__(
        self,
        browser: BrowserResource,
        settings: SourceSettings,
        browser_settings: BrowserSettings,
    ) -> None:
        self._browser = browser
        self._spread = settings.wise_spread
        self._navigation_timeout_ms = browser_settings.navigation_timeout_seconds * 1000
        self._wait_timeout_ms = browser_settings.wait_timeout_seconds * 1000
        self.source = settings.wise_url
        self.rules = ValidationRules(
            min_rate=settings.brl_per_usd_min,
            max_rate=settings.brl_per_usd_max,
            buy_exceeds_sell=True,
        )

    async def fetch(self) -> Quote:
        async with self._browser.page() as page:
            await page.goto(
                self.source,
                wait_until="domcontentloaded",
                timeout=self._navigation_timeout_ms,
            )
            await page.wait_for_function(_RATE_READY_JS, timeout=self._wait_timeout_ms)
            raw_text = await page.evaluate(_RATE_TEXT_JS)

        if not raw_text:
            raise SourceError("Rate element not found with any strategy")

        mid_rate = parse_wise_rate(raw_text)

        return Quote(
            buy_price=round_price(mid_rate * (1 + self._spread)),
            sell_price=round_price(mid_rate * (1 - self._spread)),
            source=self.source,
            timestamp=utc_now(),
            metadata=QuoteMetadata(
                mid_market_rate=mid_rate,
                spread_percentage=self._spread * 100,
                raw_text=raw_text,
                currency_pair="USD/BRL",
                provider="Wise",
            ),
        )
