"""JSON endpoints: quotes, average, slippage, and the service description."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from fxquotes.api.serializers import (
    average_to_dict,
    error_body,
    quote_to_dict,
    slippage_to_dict,
)
from fxquotes.engine.service import QuotesService
from fxquotes.exceptions import QuoteServiceError

log = structlog.get_logger(__name__)

router = APIRouter()


def _service(request: Request) -> QuotesService:
    return request.app.state.quotes_service


async def _respond(
    endpoint: str,
    error: str,
    produce: Callable[[], Awaitable[Any]],
) -> JSONResponse:
    """Run produce() and map any failure to the structured 500 body."""
    try:
        content = await produce()
    except QuoteServiceError as exc:
        log.error("endpoint_failed", endpoint=endpoint, error=str(exc))
        return JSONResponse(status_code=500, content=error_body(error, str(exc)))
    except Exception as exc:
        log.error("endpoint_unexpected_error", endpoint=endpoint, exc_info=True)
        return JSONResponse(status_code=500, content=error_body(error, str(exc) or type(exc).__name__))
    return JSONResponse(content=content)


@router.get("/")
async def describe(request: Request) -> JSONResponse:
    """Static service description plus configured sources and cache status."""
    aggregator = _service(request).aggregator
    cache = aggregator.cache

    sources = [
        {
            "name": adapter.name,
            "source": adapter.source,
            "min_rate": float(adapter.rules.min_rate),
            "max_rate": float(adapter.rules.max_rate),
            "buy_exceeds_sell": adapter.rules.buy_exceeds_sell,
        }
        for adapter in aggregator.sources
    ]

    return JSONResponse(content={
        "message": "BRL Quotes API",
        "currency_pair": "USD/BRL",
        "endpoints": {
            "GET /quotes": "Current quote from every source that responded",
            "GET /average": "Arithmetic mean of buy and sell prices across sources",
            "GET /slippage": "Each source's percentage deviation from the mean",
        },
        "sources": sources,
        "cache": await cache.status() if cache is not None else {"enabled": False},
    })


@router.get("/quotes")
async def get_quotes(request: Request) -> JSONResponse:
    """JSON list of quotes from all sources that succeeded."""
    service = _service(request)

    async def produce() -> list[dict[str, Any]]:
        return [quote_to_dict(q) for q in await service.get_quotes()]

    return await _respond("/quotes", "Failed to fetch quotes", produce)


@router.get("/average")
async def get_average(request: Request) -> JSONResponse:
    """JSON cross-source average."""
    service = _service(request)

    async def produce() -> dict[str, Any]:
        return average_to_dict(await service.get_average())

    return await _respond("/average", "Failed to calculate average", produce)


@router.get("/slippage")
async def get_slippage(request: Request) -> JSONResponse:
    """JSON list of per-source slippage against the average."""
    service = _service(request)

    async def produce() -> list[dict[str, Any]]:
        return [slippage_to_dict(s) for s in await service.get_slippage()]

    return await _respond("/slippage", "Failed to calculate slippage", produce)
