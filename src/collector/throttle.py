"""Fixed-latency request throttle for polite scraping."""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


class RequestThrottle:
    """Delays every outbound request of a browsing session.

    Installed once as a Playwright route handler; each intercepted request
    waits `delay_ms` before it is allowed to continue. Requests wait
    independently, so this caps request volume without serializing the
    page's own loading.

    Args:
        delay_ms: Fixed latency added to each request, in milliseconds.
    """

    def __init__(self, delay_ms: int = 1200) -> None:
        self._delay = max(delay_ms, 0) / 1000.0
        self.requests_delayed = 0

    @property
    def delay_seconds(self) -> float:
        return self._delay

    async def handle(self, route) -> None:
        """Route handler: sleep, then let the request through."""
        await asyncio.sleep(self.delay_seconds)
        self.requests_delayed += 1
        try:
            await route.continue_()
        except Exception as e:
            # Page navigated away or closed while the request was held
            logger.debug("Could not continue %s: %s", route.request.url, e)
