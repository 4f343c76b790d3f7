"""
Token bucket rate limiting for scrape requests.
"""

import logging
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)


class TokenBucket:
    """Thread-safe token bucket: `rate` tokens per second, at most `burst` stored."""

    def __init__(self, rate: float, burst: int, clock: Callable[[], float] = time.monotonic):
        """
        Initialize token bucket

        Args:
            rate: Tokens added per second
            burst: Maximum tokens in bucket
            clock: Monotonic time source, replaceable in tests
        """
        self.rate = rate
        self.burst = burst
        self.tokens = float(burst)
        self._clock = clock
        self.last_refill = clock()
        self.lock = threading.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self.last_refill)
        self.tokens = min(float(self.burst), self.tokens + elapsed * self.rate)
        self.last_refill = now

    def allow(self, tokens: int = 1) -> bool:
        """
        Try to consume tokens from the bucket without waiting.

        Returns:
            True if the tokens were consumed, False if the caller is throttled
        """
        with self.lock:
            self._refill()
            if self.tokens >= tokens:
                self.tokens -= tokens
                return True
            logger.debug(f"Rate limit reached ({self.rate}/s, burst {self.burst})")
            return False
