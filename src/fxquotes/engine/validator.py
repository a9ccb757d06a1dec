"""Plausibility validation for fetched quotes.

A quote can be structurally complete and still wrong: a scraper that
grabbed the wrong element, or a page showing BRL per USD where USD per
BRL was expected. Each source declares its own ValidationRules; this one
validator applies them uniformly.
"""

from decimal import Decimal, InvalidOperation

from fxquotes.exceptions import QuoteValidationError
from fxquotes.models import Quote, ValidationRules

_PRICE_FIELDS = ("buy_price", "sell_price")


class QuoteValidator:
    """Checks positivity, rate envelope and buy/sell ordering."""

    def validate(self, quote: Quote, rules: ValidationRules, source: str = "") -> Quote:
        """Validate a quote against a source's rules.

        Checks, in order:
        1. buy_price and sell_price present, finite and > 0 (every source)
        2. both prices inside [rules.min_rate, rules.max_rate]
        3. buy/sell ordering per rules.buy_exceeds_sell

        Args:
            quote: The quote to check.
            rules: The producing source's declared rules.
            source: Source name for error messages (defaults to quote.source).

        Returns:
            The same quote, for chaining.

        Raises:
            QuoteValidationError: On the first violated check.
        """
        name = source or quote.source

        for field in _PRICE_FIELDS:
            value = getattr(quote, field, None)
            if value is None:
                raise QuoteValidationError(name, field, "required", None)
            if not isinstance(value, Decimal):
                try:
                    value = Decimal(str(value))
                except InvalidOperation:
                    raise QuoteValidationError(name, field, "must be numeric", value) from None
            if not value.is_finite():
                raise QuoteValidationError(name, field, "must be finite", value)
            if value <= 0:
                raise QuoteValidationError(name, field, "must be > 0", value)
            if value < rules.min_rate:
                raise QuoteValidationError(name, field, f"min_rate {rules.min_rate}", value)
            if value > rules.max_rate:
                raise QuoteValidationError(name, field, f"max_rate {rules.max_rate}", value)

        if rules.buy_exceeds_sell is True and quote.buy_price <= quote.sell_price:
            raise QuoteValidationError(
                name,
                "buy_price",
                f"must exceed sell_price {quote.sell_price}",
                quote.buy_price,
            )
        if rules.buy_exceeds_sell is False and quote.sell_price <= quote.buy_price:
            raise QuoteValidationError(
                name,
                "sell_price",
                f"must exceed buy_price {quote.buy_price}",
                quote.sell_price,
            )

        return quote
