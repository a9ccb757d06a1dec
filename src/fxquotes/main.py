"""Entry point for the BRL quotes aggregator.

Wires all components together and either serves the HTTP API or runs a
single fan-out and prints the report.

When the server is enabled (default), uvicorn owns SIGINT/SIGTERM and the
FastAPI lifespan releases the shared browser, HTTP session and exchange
clients on shutdown. In one-shot mode (SERVER_ENABLED=false) the signal
handlers registered here cancel the collection and the same resources are
released before exit.

Component wiring order (in _build_components):
1. BrowserResource (shared headless Chromium, launched lazily)
2. HttpResource (shared aiohttp session, created lazily)
3. Source adapters (from SOURCES_ENABLED)
4. QuoteValidator and RetryPolicy
5. QuoteCache (only when CACHE_ENABLED=true)
6. Aggregator
7. QuotesService
"""

import asyncio
import json
import signal
import sys
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from fxquotes.config import AppSettings
from fxquotes.engine.aggregator import Aggregator
from fxquotes.engine.cache import QuoteCache
from fxquotes.engine.retry import RetryPolicy
from fxquotes.engine.service import QuotesService
from fxquotes.engine.validator import QuoteValidator
from fxquotes.exceptions import QuoteServiceError
from fxquotes.logging import get_logger, setup_logging
from fxquotes.sources import BrowserResource, HttpResource, build_sources


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all components from settings.

    Nothing here touches the network: the browser, HTTP session and
    exchange connections are all opened on first use.

    Args:
        settings: Application-wide settings.

    Returns:
        Dict mapping component names to instances.
    """
    browser = BrowserResource(settings.browser)
    http = HttpResource(settings.sources.http_timeout_seconds)
    sources = build_sources(settings, browser, http)

    retry_policy = RetryPolicy(settings.retry, QuoteValidator())
    cache = QuoteCache(settings.cache.ttl_seconds) if settings.cache.enabled else None
    aggregator = Aggregator(sources, retry_policy, cache=cache)

    return {
        "browser": browser,
        "http": http,
        "sources": sources,
        "retry_policy": retry_policy,
        "cache": cache,
        "aggregator": aggregator,
        "quotes_service": QuotesService(aggregator),
    }


async def _release_resources(components: dict[str, Any]) -> None:
    """Close every shared client. Each close is attempted even if another fails."""
    logger = get_logger("fxquotes.main")

    closers = [source.close for source in components["sources"]]
    closers += [components["http"].close, components["browser"].close]

    for close in closers:
        try:
            await close()
        except Exception:
            logger.warning("resource_close_failed", exc_info=True)

    logger.info("resources_released")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release shared resources when the server shuts down."""
    logger = get_logger("fxquotes.main")
    components = app.state.components

    logger.info("lifespan_started", sources=[s.name for s in components["sources"]])

    yield

    await _release_resources(components)
    logger.info("quotes_api_stopped")


def _setup_signal_handlers(task: asyncio.Task) -> None:  # type: ignore[type-arg]
    """Cancel the one-shot collection on SIGINT/SIGTERM.

    Must be called after the asyncio event loop is running.
    """
    logger = get_logger("fxquotes.main")
    loop = asyncio.get_running_loop()

    def _graceful_handler() -> None:
        logger.info("graceful_shutdown_signal")
        task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _graceful_handler)


async def run_once(components: dict[str, Any]) -> int:
    """Collect once, print the JSON report, and return a process exit code."""
    from fxquotes.api.serializers import report_to_dict

    logger = get_logger("fxquotes.main")
    service: QuotesService = components["quotes_service"]
    task = asyncio.create_task(service.collect_report())
    _setup_signal_handlers(task)

    try:
        report = await task
    except asyncio.CancelledError:
        logger.warning("collection_cancelled")
        return 130
    except QuoteServiceError as exc:
        logger.error("collection_failed", error=str(exc))
        return 1
    finally:
        await _release_resources(components)

    json.dump(report_to_dict(report), sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


async def run() -> int:
    """Run the quotes aggregator.

    When the server is enabled (SERVER_ENABLED=true, the default):
    - Creates the FastAPI app with lifespan and serves it with uvicorn

    When the server is disabled (SERVER_ENABLED=false):
    - Performs one fan-out and prints the report as JSON
    """
    settings = AppSettings()

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("fxquotes.main")

    components = _build_components(settings)

    if not settings.server.enabled:
        return await run_once(components)

    from fxquotes.api.app import create_app

    app = create_app(lifespan=lifespan)
    app.state.settings = settings
    app.state.components = components
    app.state.quotes_service = components["quotes_service"]

    logger.info(
        "starting_server",
        host=settings.server.host,
        port=settings.server.port,
    )

    config = uvicorn.Config(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()
    return 0


def main() -> None:
    """Synchronous entry point."""
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
