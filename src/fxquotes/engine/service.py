"""Request-level facade over the aggregator.

Each public method performs exactly one fan-out (or one cache read when
the cache is enabled) and derives what the caller asked for from it.
"""

from fxquotes.engine.aggregator import Aggregator
from fxquotes.engine.slippage import compute_slippage
from fxquotes.logging import get_logger
from fxquotes.models import Average, Quote, QuoteReport, Slippage

logger = get_logger(__name__)


class QuotesService:
    """Entry point used by the HTTP routes and the one-shot CLI."""

    def __init__(self, aggregator: Aggregator) -> None:
        self._aggregator = aggregator

    @property
    def aggregator(self) -> Aggregator:
        return self._aggregator

    async def get_quotes(self) -> list[Quote]:
        result = await self._aggregator.collect()
        return result.quotes

    async def get_average(self) -> Average:
        result = await self._aggregator.collect()
        return self._aggregator.average(result.quotes)

    async def get_slippage(self) -> list[Slippage]:
        result = await self._aggregator.collect()
        average = self._aggregator.average(result.quotes)
        return compute_slippage(result.quotes, average)

    async def collect_report(self) -> QuoteReport:
        """Quotes, average, slippage and per-source failures from one fan-out."""
        result = await self._aggregator.collect()
        average = self._aggregator.average(result.quotes)
        report = QuoteReport(
            quotes=result.quotes,
            average=average,
            slippage=compute_slippage(result.quotes, average),
            failures=result.failures,
        )
        logger.info(
            "quote_report_built",
            sources_count=average.sources_count,
            average_buy_price=str(average.average_buy_price),
            average_sell_price=str(average.average_sell_price),
            failures=len(result.failures),
        )
        return report
