"""Concurrent fan-out across all sources and the cross-source mean.

Every source runs through the RetryPolicy concurrently via asyncio.gather.
The aggregator waits for all of them to settle -- no first-success
short-circuit, no cancellation on first failure -- then partitions the
results. Only when every source failed is the request treated as failed.
"""

import asyncio
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from fxquotes.engine.cache import QuoteCache
from fxquotes.engine.retry import RetryPolicy
from fxquotes.exceptions import AllSourcesFailedError, NoQuotesError, RetryExhaustedError
from fxquotes.logging import get_logger
from fxquotes.models import Average, CollectResult, Quote, SourceFailure, utc_now
from fxquotes.sources.base import SourceAdapter

logger = get_logger(__name__)

AVERAGE_QUANTUM = Decimal("0.0001")


def calculate_average(quotes: Sequence[Quote]) -> Average:
    """Arithmetic mean of buy and sell prices, rounded to 4 decimal places.

    Raises:
        NoQuotesError: If quotes is empty.
    """
    if not quotes:
        raise NoQuotesError("Cannot calculate average: no quotes available")

    count = Decimal(len(quotes))
    total_buy = sum((q.buy_price for q in quotes), Decimal("0"))
    total_sell = sum((q.sell_price for q in quotes), Decimal("0"))

    return Average(
        average_buy_price=(total_buy / count).quantize(AVERAGE_QUANTUM, rounding=ROUND_HALF_UP),
        average_sell_price=(total_sell / count).quantize(AVERAGE_QUANTUM, rounding=ROUND_HALF_UP),
        sources_count=len(quotes),
        contributing_sources=tuple(q.source for q in quotes),
        timestamp=utc_now(),
    )


class Aggregator:
    """Collects quotes from all sources and computes their mean.

    Args:
        sources: Adapters to fan out to when collect() is called without any.
        retry_policy: Wraps each adapter call with retry and validation.
        cache: Optional time-boxed cache consulted before fan-out.
    """

    def __init__(
        self,
        sources: Sequence[SourceAdapter],
        retry_policy: RetryPolicy,
        cache: QuoteCache | None = None,
    ) -> None:
        self._sources = list(sources)
        self._retry_policy = retry_policy
        self._cache = cache

    @property
    def sources(self) -> list[SourceAdapter]:
        return list(self._sources)

    @property
    def cache(self) -> QuoteCache | None:
        return self._cache

    async def collect(self, sources: Sequence[SourceAdapter] | None = None) -> CollectResult:
        """Fetch from every source concurrently and keep whichever succeed.

        Returns:
            CollectResult with quotes in source order and one SourceFailure
            per source that exhausted its retries.

        Raises:
            AllSourcesFailedError: If no source produced a valid quote; the
                message enumerates every source's failure reason.
        """
        adapters = list(sources) if sources is not None else self._sources

        if self._cache is not None:
            cached = await self._cache.get()
            if cached is not None:
                logger.info("collect_served_from_cache", quotes=len(cached))
                return CollectResult(quotes=cached, from_cache=True)

        if not adapters:
            raise AllSourcesFailedError([])

        logger.info("collect_started", sources=[a.name for a in adapters])
        results = await asyncio.gather(
            *(self._retry_policy.execute(adapter) for adapter in adapters),
            return_exceptions=True,
        )

        quotes: list[Quote] = []
        failures: list[SourceFailure] = []

        for adapter, result in zip(adapters, results):
            if isinstance(result, RetryExhaustedError):
                failures.append(
                    SourceFailure(source=adapter.name, error=result.last_error, attempts=result.attempts)
                )
            elif isinstance(result, Exception):
                failures.append(SourceFailure(source=adapter.name, error=str(result)))
            elif isinstance(result, BaseException):
                raise result
            else:
                quotes.append(result.quote)

        if not quotes:
            logger.error(
                "collect_all_sources_failed",
                failures=[{"source": f.source, "error": f.error} for f in failures],
            )
            raise AllSourcesFailedError(failures)

        if failures:
            logger.warning(
                "collect_partial_failure",
                succeeded=len(quotes),
                failed=len(failures),
                failures=[{"source": f.source, "error": f.error} for f in failures],
            )
        else:
            logger.info("collect_completed", succeeded=len(quotes))

        if self._cache is not None:
            await self._cache.put(quotes)

        return CollectResult(quotes=quotes, failures=failures)

    def average(self, quotes: Sequence[Quote]) -> Average:
        """Mean over quotes; raises NoQuotesError on an empty list."""
        return calculate_average(quotes)
