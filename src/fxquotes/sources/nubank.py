"""Nubank open-data conversion rate scraper.

The page lists one row per day, newest first: the date, then the USD/BRL
rate applied to international card purchases. Nubank publishes a single
rate, so buy_price and sell_price are equal.
"""

from collections.abc import Sequence
from decimal import Decimal

from fxquotes.config import BrowserSettings, SourceSettings
from fxquotes.exceptions import SourceError
from fxquotes.models import Quote, QuoteMetadata, ValidationRules, utc_now
from fxquotes.sources.base import SourceAdapter, round_price, to_decimal
from fxquotes.sources.resources import BrowserResource

_ROW_SELECTOR = "table tbody tr"


def parse_nubank_row(cells: Sequence[str]) -> tuple[str, str, Decimal]:
    """Parse the first table row into (date, raw rate text, rate).

    Raises:
        SourceError: If the rate cell is missing, empty or not a positive number.
    """
    if len(cells) < 2:
        raise SourceError("Rate cell not found")

    date_text = cells[0].strip() or "Unknown date"
    raw_text = cells[1].strip()
    if not raw_text:
        raise SourceError("Rate text not found")

    rate = to_decimal(raw_text.replace(",", ".", 1))
    if rate <= 0:
        raise SourceError(f"Failed to parse Nubank conversion rate: {raw_text}")
    return date_text, raw_text, rate


class NubankSource(SourceAdapter):
    """Scrapes the most recent Nubank card conversion rate."""

    name = "Nubank"

    def __init__(
        self,
        browser: BrowserResource,
        settings: SourceSettings,
        browser_settings: BrowserSettings,
    ) -> None:
        self._browser = browser
        self._navigation_timeout_ms = browser_settings.navigation_timeout_seconds * 1000
        self._wait_timeout_ms = browser_settings.wait_timeout_seconds * 1000
        self.source = settings.nubank_url
        self.rules = ValidationRules(
            min_rate=settings.brl_per_usd_min,
            max_rate=settings.brl_per_usd_max,
            buy_exceeds_sell=None,
        )

    async def fetch(self) -> Quote:
        async with self._browser.page() as page:
            await page.goto(
                self.source,
                wait_until="networkidle",
                timeout=self._navigation_timeout_ms,
            )
            await page.wait_for_selector(_ROW_SELECTOR, timeout=self._wait_timeout_ms)
            cells = await page.locator(_ROW_SELECTOR).first.locator("td").all_inner_texts()

        date_text, raw_text, rate = parse_nubank_row(cells)
        price = round_price(rate)

        return Quote(
            buy_price=price,
            sell_price=price,
            source=self.source,
            timestamp=utc_now(),
            metadata=QuoteMetadata(
                date=date_text,
                raw_text=raw_text,
                currency_pair="USD/BRL",
                provider="Nubank",
                note="Rate for international credit card purchases",
            ),
        )
