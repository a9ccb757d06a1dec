"""JSON conversion for quote models.

Decimals become JSON numbers and datetimes ISO-8601 strings. Only the
HTTP layer and the CLI report call these; the engine never sees floats.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from fxquotes.models import Average, Quote, QuoteReport, Slippage, SourceFailure


def _jsonable(obj: Any) -> Any:
    """Recursively convert Decimal and datetime values for JSON serialization."""
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {k: _jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_jsonable(item) for item in obj]
    return obj


def quote_to_dict(quote: Quote) -> dict[str, Any]:
    metadata = None
    if quote.metadata is not None:
        metadata = {k: v for k, v in asdict(quote.metadata).items() if v is not None}
    return _jsonable({
        "buy_price": quote.buy_price,
        "sell_price": quote.sell_price,
        "source": quote.source,
        "timestamp": quote.timestamp,
        "metadata": metadata,
    })


def average_to_dict(average: Average) -> dict[str, Any]:
    return _jsonable({
        "average_buy_price": average.average_buy_price,
        "average_sell_price": average.average_sell_price,
        "sources_count": average.sources_count,
        "contributing_sources": average.contributing_sources,
        "calculation_method": average.calculation_method,
        "timestamp": average.timestamp,
    })


def slippage_to_dict(slippage: Slippage) -> dict[str, Any]:
    return _jsonable(asdict(slippage))


def failure_to_dict(failure: SourceFailure) -> dict[str, Any]:
    return {"source": failure.source, "error": failure.error, "attempts": failure.attempts}


def report_to_dict(report: QuoteReport) -> dict[str, Any]:
    return {
        "quotes": [quote_to_dict(q) for q in report.quotes],
        "average": average_to_dict(report.average),
        "slippage": [slippage_to_dict(s) for s in report.slippage],
        "failures": [failure_to_dict(f) for f in report.failures],
    }


def error_body(error: str, message: str) -> dict[str, str]:
    """The structured error shape every failing endpoint returns."""
    return {
        "error": error,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
