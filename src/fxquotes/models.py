"""Shared data models for the quote aggregator.

CRITICAL: All prices use Decimal. Never use float for rates or percentages;
conversion to float happens only at the JSON boundary.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal


def utc_now() -> datetime:
    """Timezone-aware current time, used for every model timestamp."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class QuoteMetadata:
    """Adapter-specific context attached to a quote. Every field is optional."""

    mid_market_rate: Decimal | None = None
    spread_percentage: Decimal | None = None
    raw_text: str | None = None
    currency_pair: str | None = None
    provider: str | None = None
    note: str | None = None
    date: str | None = None


@dataclass
class Quote:
    """One source's current exchange-rate observation."""

    buy_price: Decimal
    sell_price: Decimal
    source: str  # provenance URL, unique per adapter
    timestamp: datetime = field(default_factory=utc_now)
    metadata: QuoteMetadata | None = None


@dataclass(frozen=True)
class ValidationRules:
    """Plausibility rules a source declares for its own quotes.

    buy_exceeds_sell:
        True  -> buy_price must be strictly greater than sell_price
        False -> sell_price must be strictly greater than buy_price
        None  -> single-rate source, no ordering check
    """

    min_rate: Decimal
    max_rate: Decimal
    buy_exceeds_sell: bool | None = None


@dataclass
class Average:
    """Cross-source mean of buy and sell prices."""

    average_buy_price: Decimal
    average_sell_price: Decimal
    sources_count: int
    contributing_sources: tuple[str, ...]
    timestamp: datetime = field(default_factory=utc_now)
    calculation_method: str = "arithmetic_mean"


@dataclass
class Slippage:
    """Percentage deviation of one source's prices from the cross-source mean."""

    buy_price_slippage_pct: Decimal
    sell_price_slippage_pct: Decimal
    source: str
    quote_buy_price: Decimal
    quote_sell_price: Decimal
    average_buy_price: Decimal
    average_sell_price: Decimal
    provider: str = "Unknown"
    timestamp: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class SourceFailure:
    """Terminal failure of one source after all retry attempts."""

    source: str
    error: str
    attempts: int = 0


@dataclass
class FetchOutcome:
    """Successful result of a retried fetch.

    prior_failures holds the messages of the attempts that failed before
    the one that succeeded.
    """

    quote: Quote
    attempts: int
    prior_failures: list[str] = field(default_factory=list)


@dataclass
class CollectResult:
    """Outcome of one fan-out across all sources."""

    quotes: list[Quote]
    failures: list[SourceFailure] = field(default_factory=list)
    from_cache: bool = False


@dataclass
class QuoteReport:
    """Everything derived from one fan-out, used by the one-shot CLI mode."""

    quotes: list[Quote]
    average: Average
    slippage: list[Slippage]
    failures: list[SourceFailure] = field(default_factory=list)
