"""Per-user sliding-window limits for the AI generation endpoints.

State lives in process memory, so limits apply per worker.
"""

import asyncio
import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from threading import Lock
from time import monotonic

from src.core.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""

    max_requests: int = 20
    window_seconds: int = 3600
    cleanup_interval_seconds: int = 300

    @classmethod
    def from_settings(cls) -> "RateLimitConfig":
        settings = get_settings()
        return cls(
            max_requests=settings.ai_rate_limit_requests,
            window_seconds=settings.ai_rate_limit_window_seconds,
        )


class InMemoryRateLimiter:
    """Thread-safe sliding-window limiter keyed by arbitrary strings.

    Each key keeps the monotonic timestamps of its requests inside the
    window, oldest first.
    """

    def __init__(self, config: RateLimitConfig | None = None) -> None:
        self.config = config or RateLimitConfig()
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._lock = Lock()
        self._cleanup_task: asyncio.Task | None = None

    def _expire(self, hits: deque[float], now: float) -> None:
        cutoff = now - self.config.window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()

    async def check_and_increment(self, key: str) -> tuple[bool, int, int]:
        """Record a request for ``key`` unless it is over the limit.

        Args:
            key: Unique identifier, e.g. ``ai:<user_id>``.

        Returns:
            Tuple of (allowed, remaining_requests, retry_after_seconds).
        """
        limit = self.config.max_requests
        now = monotonic()

        with self._lock:
            hits = self._hits[key]
            self._expire(hits, now)

            if len(hits) >= limit:
                # the slot frees up when the oldest hit leaves the window
                retry_after = int(hits[0] + self.config.window_seconds - now) + 1
                return False, 0, max(retry_after, 1)

            hits.append(now)
            return True, limit - len(hits), 0

    async def cleanup(self) -> int:
        """Drop keys with no requests left in the window.

        Returns:
            int: Number of keys removed.
        """
        now = monotonic()
        with self._lock:
            idle = []
            for key, hits in self._hits.items():
                self._expire(hits, now)
                if not hits:
                    idle.append(key)
            for key in idle:
                del self._hits[key]
        return len(idle)

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.cleanup_interval_seconds)
            removed = await self.cleanup()
            if removed:
                logger.debug("Rate limiter dropped %d idle keys", removed)

    async def start_cleanup_task(self) -> None:
        if self._cleanup_task is None:
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())
            logger.info("Rate limiter cleanup task started")

    async def stop_cleanup_task(self) -> None:
        if self._cleanup_task is None:
            return
        self._cleanup_task.cancel()
        try:
            await self._cleanup_task
        except asyncio.CancelledError:
            pass
        self._cleanup_task = None
        logger.info("Rate limiter cleanup task stopped")


_rate_limiter: InMemoryRateLimiter | None = None


def get_rate_limiter() -> InMemoryRateLimiter:
    """Get or create the global rate limiter instance."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = InMemoryRateLimiter(RateLimitConfig.from_settings())
    return _rate_limiter


async def init_rate_limiter() -> InMemoryRateLimiter:
    """Create the limiter and start its cleanup task. Called at startup."""
    limiter = get_rate_limiter()
    await limiter.start_cleanup_task()
    return limiter


async def shutdown_rate_limiter() -> None:
    """Stop the cleanup task. Called at shutdown."""
    if _rate_limiter:
        await _rate_limiter.stop_cleanup_task()
