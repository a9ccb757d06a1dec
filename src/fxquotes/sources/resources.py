"""Process-wide client resources shared by the source adapters.

One headless browser and one HTTP session are created lazily on first
use and released explicitly at shutdown. Adapters receive these objects
by injection, so tests can substitute fakes.

Each browser-based adapter gets its own browser context and page so one
source's failure or leaked page cannot disturb another's navigation.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiohttp
from playwright.async_api import Browser, Page, Playwright, async_playwright

from fxquotes.config import BrowserSettings
from fxquotes.logging import get_logger

logger = get_logger(__name__)


class BrowserResource:
    """Lazily launched shared Chromium instance.

    Concurrent first callers are serialized by an asyncio.Lock so the
    browser is launched exactly once.
    """

    def __init__(self, settings: BrowserSettings) -> None:
        self._settings = settings
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    async def acquire(self) -> Browser:
        """Return the shared browser, launching it on first use."""
        async with self._lock:
            if self._browser is None:
                logger.info("launching_browser", headless=self._settings.headless)
                playwright = await async_playwright().start()
                try:
                    browser = await playwright.chromium.launch(
                        headless=self._settings.headless,
                        args=list(self._settings.launch_args),
                    )
                except BaseException:
                    # Includes cancellation by an attempt timeout mid-launch
                    await playwright.stop()
                    raise
                self._playwright, self._browser = playwright, browser
                logger.info("browser_launched")
            return self._browser

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Yield a page in a fresh, isolated browser context.

        The context (and with it the page) is closed on exit, whether the
        caller succeeded or not.
        """
        browser = await self.acquire()
        context = await browser.new_context()
        try:
            yield await context.new_page()
        finally:
            await context.close()

    async def close(self) -> None:
        """Close the browser and stop playwright. Safe to call repeatedly."""
        async with self._lock:
            if self._browser is not None:
                logger.info("closing_browser")
                await self._browser.close()
                self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
                logger.info("browser_closed")


class HttpResource:
    """Lazily created shared aiohttp session for JSON API sources."""

    def __init__(self, timeout_seconds: float = 15.0) -> None:
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: aiohttp.ClientSession | None = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> aiohttp.ClientSession:
        """Return the shared session, creating it on first use."""
        async with self._lock:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession(timeout=self._timeout)
                logger.debug("http_session_created")
            return self._session

    async def close(self) -> None:
        """Close the session. CRITICAL: must be called to avoid unclosed-session warnings."""
        async with self._lock:
            if self._session is not None:
                await self._session.close()
                self._session = None
                logger.info("http_session_closed")
