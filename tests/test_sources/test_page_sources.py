"""Tests for the browser-based sources (Wise, Nubank).

Page parsing is tested directly; fetch() runs against a fake
BrowserResource whose page() yields a mocked playwright Page.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from fxquotes.config import BrowserSettings, SourceSettings
from fxquotes.exceptions import SourceError
from fxquotes.sources.nubank import NubankSource, parse_nubank_row
from fxquotes.sources.wise import WiseSource, parse_wise_rate


class FakeBrowser:
    """Stands in for BrowserResource; hands out one prepared page."""

    def __init__(self, page: MagicMock) -> None:
        self._page = page
        self.pages_opened = 0
        self.pages_closed = 0

    @asynccontextmanager
    async def page(self) -> AsyncIterator[MagicMock]:
        self.pages_opened += 1
        try:
            yield self._page
        finally:
            self.pages_closed += 1


@pytest.fixture
def source_settings() -> SourceSettings:
    return SourceSettings()


@pytest.fixture
def browser_settings() -> BrowserSettings:
    return BrowserSettings(navigation_timeout_seconds=30.0, wait_timeout_seconds=10.0)


# ---------------------------------------------------------------------------
# Wise
# ---------------------------------------------------------------------------


class TestParseWiseRate:
    def test_comma_decimal_separator(self) -> None:
        assert parse_wise_rate("$1 USD = 5,385 BRL") == Decimal("5.385")

    def test_dot_decimal_separator(self) -> None:
        assert parse_wise_rate("1 USD = 5.4120 BRL") == Decimal("5.4120")

    def test_fragment_without_usd_prefix(self) -> None:
        assert parse_wise_rate("= 5,39 brl") == Decimal("5.39")

    def test_unparseable_text_raises(self) -> None:
        with pytest.raises(SourceError, match="Could not parse rate"):
            parse_wise_rate("Rates unavailable")

    def test_zero_rate_raises(self) -> None:
        with pytest.raises(SourceError, match="Invalid rate"):
            parse_wise_rate("1 USD = 0,000 BRL")


class TestWiseSource:
    def test_declares_brl_per_usd_rules(self, source_settings, browser_settings) -> None:
        source = WiseSource(FakeBrowser(MagicMock()), source_settings, browser_settings)

        assert source.name == "Wise"
        assert source.rules.min_rate == Decimal("4.0")
        assert source.rules.max_rate == Decimal("7.0")
        assert source.rules.buy_exceeds_sell is True

    @pytest.mark.asyncio
    async def test_fetch_applies_spread(self, source_settings, browser_settings) -> None:
        page = MagicMock()
        page.goto = AsyncMock()
        page.wait_for_function = AsyncMock()
        page.evaluate = AsyncMock(return_value="$1 USD = 5,385 BRL")
        browser = FakeBrowser(page)
        source = WiseSource(browser, source_settings, browser_settings)

        quote = await source.fetch()

        # 5.385 * 1.005 = 5.411925 ; 5.385 * 0.995 = 5.358075
        assert quote.buy_price == Decimal("5.4119")
        assert quote.sell_price == Decimal("5.3581")
        assert quote.source == source_settings.wise_url
        assert quote.metadata is not None
        assert quote.metadata.mid_market_rate == Decimal("5.385")
        assert quote.metadata.spread_percentage == Decimal("0.500")
        assert quote.metadata.currency_pair == "USD/BRL"
        assert quote.metadata.raw_text == "$1 USD = 5,385 BRL"
        assert quote.timestamp.tzinfo is not None

        page.goto.assert_awaited_once()
        _, kwargs = page.goto.await_args
        assert kwargs["wait_until"] == "domcontentloaded"
        assert kwargs["timeout"] == 30000
        assert browser.pages_closed == 1

    @pytest.mark.asyncio
    async def test_fetch_without_rate_element_raises(self, source_settings, browser_settings) -> None:
        page = MagicMock()
        page.goto = AsyncMock()
        page.wait_for_function = AsyncMock()
        page.evaluate = AsyncMock(return_value=None)
        source = WiseSource(FakeBrowser(page), source_settings, browser_settings)

        with pytest.raises(SourceError, match="Rate element not found"):
            await source.fetch()

    @pytest.mark.asyncio
    async def test_page_closed_when_navigation_fails(self, source_settings, browser_settings) -> None:
        page = MagicMock()
        page.goto = AsyncMock(side_effect=TimeoutError("Navigation timeout of 30000 ms exceeded"))
        browser = FakeBrowser(page)
        source = WiseSource(browser, source_settings, browser_settings)

        with pytest.raises(TimeoutError):
            await source.fetch()

        assert browser.pages_closed == 1


# ---------------------------------------------------------------------------
# Nubank
# ---------------------------------------------------------------------------


class TestParseNubankRow:
    def test_parses_date_and_rate(self) -> None:
        assert parse_nubank_row(["18/10/2026", " 5.4873 "]) == ("18/10/2026", "5.4873", Decimal("5.4873"))

    def test_comma_decimal_separator(self) -> None:
        assert parse_nubank_row(["18/10/2026", "5,4873"])[2] == Decimal("5.4873")

    def test_missing_date_defaults(self) -> None:
        assert parse_nubank_row(["", "5.40"])[0] == "Unknown date"

    def test_missing_rate_cell_raises(self) -> None:
        with pytest.raises(SourceError, match="Rate cell not found"):
            parse_nubank_row(["18/10/2026"])

    def test_empty_rate_text_raises(self) -> None:
        with pytest.raises(SourceError, match="Rate text not found"):
            parse_nubank_row(["18/10/2026", "  "])

    def test_non_numeric_rate_raises(self) -> None:
        with pytest.raises(SourceError):
            parse_nubank_row(["18/10/2026", "n/a"])


class TestNubankSource:
    def test_single_rate_rules(self, source_settings, browser_settings) -> None:
        source = NubankSource(FakeBrowser(MagicMock()), source_settings, browser_settings)
        assert source.rules.buy_exceeds_sell is None

    @pytest.mark.asyncio
    async def test_fetch_reads_first_row(self, source_settings, browser_settings) -> None:
        page = MagicMock()
        page.goto = AsyncMock()
        page.wait_for_selector = AsyncMock()
        cells = page.locator.return_value.first.locator.return_value
        cells.all_inner_texts = AsyncMock(return_value=["18/10/2026", "5.48735"])
        source = NubankSource(FakeBrowser(page), source_settings, browser_settings)

        quote = await source.fetch()

        assert quote.buy_price == Decimal("5.4874")
        assert quote.sell_price == quote.buy_price
        assert quote.metadata is not None
        assert quote.metadata.date == "18/10/2026"
        assert quote.metadata.provider == "Nubank"
        page.locator.assert_called_with("table tbody tr")
        _, kwargs = page.goto.await_args
        assert kwargs["wait_until"] == "networkidle"
        page.wait_for_selector.assert_awaited_once_with("table tbody tr", timeout=10000)
