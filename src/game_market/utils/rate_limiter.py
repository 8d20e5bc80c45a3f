"""
Request pacing for the catalog API.

Spaces requests out to the configured per-minute budget while letting
up to ``burst_size`` through back to back, and holds every request
while the server has asked the client to back off (HTTP 429).
"""

import asyncio
import time

from game_market.config import CatalogAPIConfig
from game_market.logger import get_logger


class RateLimiter:
    """
    Paces catalog requests on a monotonic schedule.

    Each request books the next slot one interval after the previous
    booking. A request may run ahead of its slot by up to
    ``burst_size - 1`` intervals, which is what lets a burst through.

    Example:
        >>> limiter = RateLimiter.from_config(settings.catalog)
        >>> await limiter.acquire()
    """

    def __init__(self, requests_per_minute: int = 60, burst_size: int = 10) -> None:
        if requests_per_minute < 1 or burst_size < 1:
            raise ValueError("requests_per_minute and burst_size must be positive")

        self.requests_per_minute = requests_per_minute
        self.burst_size = burst_size
        self._interval = 60.0 / requests_per_minute
        self._slack = self._interval * (burst_size - 1)
        self._next_slot = time.monotonic()
        self._paused_until = 0.0
        self._lock = asyncio.Lock()
        self._logger = get_logger(__name__, component="rate_limiter")

    @classmethod
    def from_config(cls, config: CatalogAPIConfig) -> "RateLimiter":
        return cls(
            requests_per_minute=config.requests_per_minute,
            burst_size=config.burst_size,
        )

    def _ready_at(self, now: float) -> float:
        return max(self._next_slot - self._slack, self._paused_until, now)

    @property
    def delay(self) -> float:
        """Seconds the next ``acquire`` would wait right now."""
        now = time.monotonic()
        return self._ready_at(now) - now

    def pause(self, seconds: float) -> None:
        """
        Hold every acquisition for ``seconds`` from now.

        A shorter pause never cuts an earlier, longer one short.
        """
        if seconds <= 0:
            return
        resume_at = time.monotonic() + seconds
        if resume_at > self._paused_until:
            self._paused_until = resume_at
            self._logger.info("Requests paused by server", pause_seconds=round(seconds, 2))

    async def acquire(self) -> None:
        """Wait for the next request slot and book it."""
        async with self._lock:
            now = time.monotonic()
            ready_at = self._ready_at(now)
            if ready_at > now:
                self._logger.debug(
                    "Request budget exhausted, waiting",
                    wait_seconds=round(ready_at - now, 2),
                )
                await asyncio.sleep(ready_at - now)
                now = time.monotonic()

            self._next_slot = max(self._next_slot, now) + self._interval
