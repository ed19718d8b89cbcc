"""Headless browsing session shared by every collector target.

One session is built per run and handed to each processing step. It owns
the Playwright browser, a single context with the request throttle
installed, and the page that every target navigates.
"""

from __future__ import annotations

import logging
from typing import Optional

from fake_useragent import UserAgent
from playwright.async_api import Browser, BrowserContext, Page, async_playwright

from ..common.config import CollectorSettings
from .throttle import RequestThrottle

logger = logging.getLogger(__name__)


class BrowserSession:
    """Playwright Chromium session with a session-wide request delay.

    Usage:
        async with BrowserSession(config) as session:
            await session.goto(url)
            cards = await session.page.query_selector_all(...)
    """

    def __init__(
        self,
        config: CollectorSettings,
        throttle: Optional[RequestThrottle] = None,
    ) -> None:
        self.config = config
        self.throttle = throttle or RequestThrottle(config.request_delay_ms)
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser session not started")
        return self._page

    # --- Lifecycle ---

    async def start(self) -> None:
        """Launch Chromium and install the request throttle once.

        A failure part-way through releases whatever was already started.
        """
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self.config.headless)

            user_agent = self.config.user_agent
            if self.config.rotate_user_agent:
                user_agent = UserAgent(fallback=self.config.user_agent).random

            self._context = await self._browser.new_context(user_agent=user_agent)
            await self._context.route("**/*", self.throttle.handle)
            self._page = await self._context.new_page()
        except BaseException:
            await self.stop()
            raise

        logger.info(
            "Chromium launched (headless=%s, request delay %.1fs)",
            self.config.headless, self.throttle.delay_seconds,
        )

    async def stop(self) -> None:
        """Close context, browser and Playwright, each independently."""
        for name, closer in (
            ("context", self._context and self._context.close),
            ("browser", self._browser and self._browser.close),
            ("playwright", self._playwright and self._playwright.stop),
        ):
            if not closer:
                continue
            try:
                await closer()
            except Exception as e:
                logger.warning("Failed to close %s: %s", name, e)
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None
        logger.info("Browser closed (%d requests throttled)", self.throttle.requests_delayed)

    async def __aenter__(self) -> BrowserSession:
        await self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.stop()

    # --- Navigation ---

    async def goto(self, url: str) -> None:
        """Navigate and wait the fixed settle delay for client rendering."""
        await self.page.goto(
            url,
            wait_until="domcontentloaded",
            timeout=self.config.navigation_timeout_ms,
        )
        await self.page.wait_for_timeout(self.config.settle_delay_ms)
