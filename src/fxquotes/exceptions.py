"""Custom exceptions for the quote aggregator.

Adapter, retry, and aggregation exceptions live here to avoid circular
imports between the sources and engine packages.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fxquotes.models import SourceFailure


class QuoteServiceError(Exception):
    """Base exception for all quote aggregator errors."""


class SourceError(QuoteServiceError):
    """Raised by a source adapter when a single acquisition attempt fails."""


class QuoteValidationError(QuoteServiceError):
    """Raised when a fetched quote fails a plausibility check.

    Args:
        source: Name of the source that produced the quote.
        field: The offending field ("buy_price" or "sell_price").
        bound: Description of the violated bound (e.g. "max_rate 7.0").
        value: The rejected value, if there was one.
    """

    def __init__(
        self,
        source: str,
        field: str,
        bound: str,
        value: Decimal | None,
    ) -> None:
        self.source = source
        self.field = field
        self.bound = bound
        self.value = value
        super().__init__(f"{source}: {field}={value} violates {bound}")


class RetryExhaustedError(QuoteServiceError):
    """Raised when every retry attempt for one source has failed."""

    def __init__(self, source: str, attempts: int, last_error: str) -> None:
        self.source = source
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{source} failed after {attempts} attempts: {last_error}")


class AllSourcesFailedError(QuoteServiceError):
    """Raised when no source produced a valid quote."""

    def __init__(self, failures: Sequence[SourceFailure]) -> None:
        self.failures = list(failures)
        reasons = "; ".join(f"{f.source}: {f.error}" for f in self.failures)
        super().__init__(f"All sources failed: {reasons}")


class NoQuotesError(QuoteServiceError):
    """Raised when an average is requested over zero quotes."""


class InvalidAverageError(QuoteServiceError):
    """Raised when slippage is computed against a zero average price."""
