"""Bounded exponential-backoff retry around a single source adapter.

A failed validation counts as a failed attempt, so a bad scrape is
retried just like a network error. Backoff is an asyncio.sleep, so the
waits of concurrently retrying sources overlap instead of serializing.

Every execute() call starts clean: no jitter, no circuit breaker, no
state shared between calls.
"""

import asyncio

import structlog

from fxquotes.config import RetrySettings
from fxquotes.engine.validator import QuoteValidator
from fxquotes.exceptions import RetryExhaustedError
from fxquotes.logging import get_logger
from fxquotes.models import FetchOutcome
from fxquotes.sources.base import SourceAdapter

logger = get_logger(__name__)


def _describe(exc: BaseException) -> str:
    message = str(exc)
    if isinstance(exc, asyncio.TimeoutError):
        return message or "attempt timed out"
    return message or type(exc).__name__


class RetryPolicy:
    """Retries one adapter's fetch with doubling delays between attempts.

    Delay after failed attempt n (1-based) is
    backoff_initial_seconds * 2 ** (n - 1): 2s, 4s, 8s with the defaults.

    Args:
        settings: Retry settings (max attempts, initial backoff, attempt timeout).
        validator: Validator applied to every fetched quote.
    """

    def __init__(
        self,
        settings: RetrySettings,
        validator: QuoteValidator | None = None,
    ) -> None:
        if settings.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._settings = settings
        self._validator = validator or QuoteValidator()

    @property
    def max_attempts(self) -> int:
        return self._settings.max_attempts

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number `attempt` (1-based)."""
        return self._settings.backoff_initial_seconds * (2 ** (attempt - 1))

    async def execute(self, adapter: SourceAdapter) -> FetchOutcome:
        """Fetch and validate one quote, retrying on any failure.

        Returns:
            FetchOutcome with the validated quote, the attempt number that
            succeeded and the messages of the attempts that failed before it.

        Raises:
            RetryExhaustedError: After max_attempts consecutive failures,
                carrying the last failure's message and the attempt count.
        """
        max_attempts = self._settings.max_attempts
        failures: list[str] = []

        with structlog.contextvars.bound_contextvars(source=adapter.name):
            for attempt in range(1, max_attempts + 1):
                try:
                    quote = await asyncio.wait_for(
                        adapter.fetch(),
                        timeout=self._settings.attempt_timeout_seconds,
                    )
                    self._validator.validate(quote, adapter.rules, adapter.name)
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    failures.append(_describe(exc))
                    logger.warning(
                        "source_attempt_failed",
                        attempt=attempt,
                        max_attempts=max_attempts,
                        error=failures[-1],
                        error_type=type(exc).__name__,
                    )
                    if attempt < max_attempts:
                        delay = self.backoff_delay(attempt)
                        logger.debug("source_retry_backoff", delay_seconds=delay)
                        await asyncio.sleep(delay)
                    continue

                logger.info(
                    "source_quote_accepted",
                    attempt=attempt,
                    buy_price=str(quote.buy_price),
                    sell_price=str(quote.sell_price),
                )
                return FetchOutcome(quote=quote, attempts=attempt, prior_failures=failures)

            logger.error("source_failed_permanently", attempts=max_attempts, error=failures[-1])
            raise RetryExhaustedError(adapter.name, max_attempts, failures[-1])
