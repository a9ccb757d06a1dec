"""Optional time-boxed cache of the last successful fan-out.

There is only one query shape, so the cache holds a single entry. It is
off by default (CACHE_ENABLED=false); when enabled the Aggregator serves
from it while the entry is younger than ttl_seconds.

Uses asyncio.Lock for safe concurrent reads/writes from request handlers.
"""

import asyncio
import time
from collections.abc import Callable
from typing import Any

from fxquotes.logging import get_logger
from fxquotes.models import Quote

logger = get_logger(__name__)


class QuoteCache:
    """Single-entry quote cache with age-based invalidation."""

    def __init__(
        self,
        ttl_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._quotes: list[Quote] | None = None
        self._stored_at: float | None = None
        self._lock = asyncio.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def _age(self) -> float | None:
        if self._stored_at is None:
            return None
        return self._clock() - self._stored_at

    async def get(self) -> list[Quote] | None:
        """Return a copy of the cached quotes, or None if empty or expired."""
        async with self._lock:
            age = self._age()
            if self._quotes is None or age is None:
                return None
            if age >= self._ttl:
                logger.debug("quote_cache_expired", age_seconds=round(age, 1))
                return None
            logger.debug("quote_cache_hit", age_seconds=round(age, 1))
            return list(self._quotes)

    async def put(self, quotes: list[Quote]) -> None:
        """Replace the cached entry and reset its age."""
        async with self._lock:
            self._quotes = list(quotes)
            self._stored_at = self._clock()

    async def invalidate(self) -> None:
        """Drop the cached entry."""
        async with self._lock:
            self._quotes = None
            self._stored_at = None
            logger.info("quote_cache_cleared")

    async def status(self) -> dict[str, Any]:
        """Return {has_cache, age_seconds, is_valid} for the description endpoint."""
        async with self._lock:
            age = self._age()
            has_cache = self._quotes is not None
            return {
                "has_cache": has_cache,
                "age_seconds": round(age, 1) if age is not None else None,
                "is_valid": has_cache and age is not None and age < self._ttl,
            }
