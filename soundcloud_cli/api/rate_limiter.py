"""
Provides an adaptive throttle that spaces out api-v2 calls and backs off on 429 responses.
"""

import asyncio
import logging
import time

log = logging.getLogger(__name__)


class RequestThrottle:
    """
    Enforces a minimum interval between requests.

    A 429 response doubles the interval (up to ``max_interval``); every
    successful minute without one shrinks it again towards ``min_interval``.
    """

    def __init__(self, min_interval: float = 0.05, max_interval: float = 2.0):
        self._min_interval = min_interval
        self._max_interval = max_interval
        self._interval = min_interval
        self._last_request = 0.0
        self._last_backoff = 0.0
        self._lock = asyncio.Lock()

    @property
    def interval(self) -> float:
        return self._interval

    async def on_429(self) -> None:
        async with self._lock:
            self._interval = min(self._max_interval, self._interval * 2)
            self._last_backoff = time.monotonic()
            log.warning(
                f"[yellow]Rate limited by SoundCloud. Spacing requests "
                f"{self._interval:.2f}s apart.[/yellow]"
            )

    async def acquire(self) -> None:
        """Waits until the next request is allowed to go out."""
        async with self._lock:
            now = time.monotonic()
            if (
                self._interval > self._min_interval
                and now - self._last_backoff > 60
            ):
                self._interval = max(self._min_interval, self._interval / 2)
                self._last_backoff = now

            wait = self._last_request + self._interval - now
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request = time.monotonic()
