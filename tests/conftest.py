"""Shared test fixtures for the quote aggregator."""

from collections.abc import Callable, Sequence
from decimal import Decimal

import pytest

from fxquotes.config import AppSettings, CacheSettings, RetrySettings, ServerSettings, SourceSettings
from fxquotes.logging import setup_logging
from fxquotes.models import Quote, QuoteMetadata, ValidationRules
from fxquotes.sources.base import SourceAdapter

BRL_PER_USD = ValidationRules(
    min_rate=Decimal("4.0"),
    max_rate=Decimal("7.0"),
    buy_exceeds_sell=True,
)


def _make_quote(
    buy: str = "5.4000",
    sell: str = "5.3000",
    source: str = "https://example.test/fx",
    provider: str | None = "Example",
) -> Quote:
    """Create a minimal Quote for testing."""
    return Quote(
        buy_price=Decimal(buy),
        sell_price=Decimal(sell),
        source=source,
        metadata=QuoteMetadata(provider=provider) if provider else None,
    )


class FakeSource(SourceAdapter):
    """Scripted adapter: each fetch() pops the next outcome.

    An outcome is either a Quote (returned) or an Exception (raised). The
    last outcome repeats once the script is exhausted.
    """

    def __init__(
        self,
        name: str,
        outcomes: Sequence[Quote | Exception],
        rules: ValidationRules = BRL_PER_USD,
    ) -> None:
        self.name = name
        self.source = f"https://{name.lower()}.test"
        self.rules = rules
        self._outcomes = list(outcomes)
        self.calls = 0
        self.closed = False

    async def fetch(self) -> Quote:
        index = min(self.calls, len(self._outcomes) - 1)
        self.calls += 1
        outcome = self._outcomes[index]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _stderr_logging() -> None:
    """Send log lines to stderr so stdout holds only what the code prints."""
    setup_logging("DEBUG")


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults (no cache, fast retries, API source only)."""
    return AppSettings(
        log_level="DEBUG",
        retry=RetrySettings(max_attempts=3, backoff_initial_seconds=2.0, attempt_timeout_seconds=5.0),
        sources=SourceSettings(enabled=["nomad"]),
        cache=CacheSettings(enabled=False),
        server=ServerSettings(enabled=False, port=3001),
    )


@pytest.fixture
def make_quote() -> Callable[..., Quote]:
    return _make_quote


@pytest.fixture
def fake_source() -> type[FakeSource]:
    return FakeSource
