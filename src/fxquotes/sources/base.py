"""Abstract source adapter interface.

Defines the contract every quote source implements. The engine depends
only on this interface, keeping page-scraping and API details isolated
in the concrete adapters.
"""

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal

from fxquotes.exceptions import SourceError
from fxquotes.models import Quote, ValidationRules

PRICE_QUANTUM = Decimal("0.0001")


def round_price(value: Decimal) -> Decimal:
    """Round a price to 4 decimal places (half up)."""
    return value.quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)


def to_decimal(raw: object) -> Decimal:
    """Convert an upstream number or numeric string to Decimal via str().

    Raises:
        SourceError: If the value is not a finite number.
    """
    try:
        value = Decimal(str(raw))
    except Exception as exc:
        raise SourceError(f"Invalid numeric value: {raw!r}") from exc
    if not value.is_finite():
        raise SourceError(f"Invalid numeric value: {raw!r}")
    return value


class SourceAdapter(ABC):
    """Abstract base class for quote sources.

    Attributes:
        name: Human-readable source name used in failure reports ("Wise").
        source: Provenance URL stamped on every quote.
        rules: Plausibility envelope and buy/sell ordering for this source.
    """

    name: str
    source: str
    rules: ValidationRules

    @abstractmethod
    async def fetch(self) -> Quote:
        """Acquire one quote. Raises on any failure; the caller retries."""
        ...

    async def close(self) -> None:
        """Release adapter-owned resources. Shared resources are closed elsewhere."""
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
