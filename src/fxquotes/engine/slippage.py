"""Per-source slippage against the cross-source mean.

slippage_pct = (quote_price - average_price) / average_price * 100,
rounded to 2 decimal places. Positive means the source is more expensive
than the mean.
"""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from fxquotes.exceptions import InvalidAverageError
from fxquotes.models import Average, Quote, Slippage, utc_now

SLIPPAGE_QUANTUM = Decimal("0.01")
_HUNDRED = Decimal("100")


def slippage_pct(price: Decimal, average_price: Decimal) -> Decimal:
    """Signed percentage deviation of price from average_price, 2 dp."""
    return ((price - average_price) / average_price * _HUNDRED).quantize(
        SLIPPAGE_QUANTUM, rounding=ROUND_HALF_UP
    )


def compute_slippage(quotes: Sequence[Quote], average: Average) -> list[Slippage]:
    """One Slippage per quote, in input order.

    Raises:
        InvalidAverageError: If either average price is zero.
    """
    if average.average_buy_price == 0 or average.average_sell_price == 0:
        raise InvalidAverageError(
            "Cannot calculate slippage against a zero average price"
        )

    now = utc_now()
    return [
        Slippage(
            buy_price_slippage_pct=slippage_pct(quote.buy_price, average.average_buy_price),
            sell_price_slippage_pct=slippage_pct(quote.sell_price, average.average_sell_price),
            source=quote.source,
            quote_buy_price=quote.buy_price,
            quote_sell_price=quote.sell_price,
            average_buy_price=average.average_buy_price,
            average_sell_price=average.average_sell_price,
            provider=(quote.metadata.provider if quote.metadata and quote.metadata.provider else "Unknown"),
            timestamp=now,
        )
        for quote in quotes
    ]
