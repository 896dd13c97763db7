"""Fixed-window rate limiting for a single scraper."""
import asyncio
import time
import logging
from typing import Optional

from ..metrics import MetricsCollector, metrics as default_metrics

logger = logging.getLogger(__name__)

class RateLimiter:
    """Counts requests per fixed time window and suspends callers over quota.

    Each adapter owns one instance; window state is never shared. A burst of
    up to twice the quota can pass around a window boundary.
    """

    def __init__(self, max_requests_per_window: int = 10, window_duration: float = 60.0,
                 name: str = "default", metrics: Optional[MetricsCollector] = None):
        """Initialize the rate limiter.

        Args:
            max_requests_per_window: Requests admitted per window
            window_duration: Window length in seconds
            name: Label used in logs and metrics (usually the source id)
            metrics: Metrics collector, defaults to the global one
        """
        self.max_requests_per_window = max_requests_per_window
        self.window_duration = window_duration
        self.name = name
        self.metrics = metrics or default_metrics
        self.request_count = 0
        self.window_start = time.monotonic()

    def _reset_window(self, now: float) -> None:
        self.request_count = 0
        self.window_start = now

    async def admit(self) -> float:
        """Wait until a request is allowed, then record it.

        Returns:
            Seconds spent waiting (0.0 when admitted immediately)
        """
        now = time.monotonic()
        elapsed = now - self.window_start
        waited = 0.0

        if elapsed >= self.window_duration:
            self._reset_window(now)
        elif self.request_count >= self.max_requests_per_window:
            waited = self.window_duration - elapsed
            logger.info(f"Rate limit reached for {self.name}, waiting {waited:.1f} seconds")
            self.metrics.record_rate_limit_hit(self.name)
            await asyncio.sleep(waited)
            self._reset_window(time.monotonic())

        self.request_count += 1
        return waited

    @property
    def remaining(self) -> int:
        """Requests left in the current window."""
        if time.monotonic() - self.window_start >= self.window_duration:
            return self.max_requests_per_window
        return max(0, self.max_requests_per_window - self.request_count)
