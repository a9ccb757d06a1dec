"""Quote acquisition and aggregation engine.

Provides the retry policy, validator, concurrent aggregator, slippage
calculation, the optional quote cache, and the QuotesService facade.
"""

from fxquotes.engine.aggregator import Aggregator, calculate_average
from fxquotes.engine.cache import QuoteCache
from fxquotes.engine.retry import RetryPolicy
from fxquotes.engine.service import QuotesService
from fxquotes.engine.slippage import compute_slippage, slippage_pct
from fxquotes.engine.validator import QuoteValidator

__all__ = [
    "Aggregator",
    "QuoteCache",
    "QuoteValidator",
    "QuotesService",
    "RetryPolicy",
    "calculate_average",
    "compute_slippage",
    "slippage_pct",
]
