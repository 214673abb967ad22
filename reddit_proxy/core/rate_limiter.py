"""Inbound rate limiting per client address."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict

logger = logging.getLogger(__name__)


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_in: float


class FixedWindowRateLimiter:
    """
    Fixed-window request counter keyed by client address.

    Each key may make ``max_requests`` requests per ``window_seconds``. The
    window starts with the key's first request and resets once it has
    elapsed. All state lives on the event loop thread, so no lock is needed.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the rate limiter.

        Args:
            max_requests: Requests allowed per window
            window_seconds: Window length in seconds
            clock: Monotonic time source
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        # key -> [window_start, count]
        self._windows: Dict[str, list] = {}

    def hit(self, key: str) -> RateLimitDecision:
        """Record a request for ``key`` and decide whether it may proceed."""
        now = self._clock()
        window = self._windows.get(key)
        if window is None or now - window[0] >= self.window_seconds:
            window = [now, 0]
            self._windows[key] = window
            self._prune(now)

        window[1] += 1
        reset_in = max(0.0, window[0] + self.window_seconds - now)
        allowed = window[1] <= self.max_requests
        if not allowed:
            logger.warning(f"Rate limit exceeded for {key}: {window[1]}/{self.max_requests}")

        return RateLimitDecision(
            allowed=allowed,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - window[1]),
            reset_in=reset_in,
        )

    def _prune(self, now: float) -> None:
        expired = [k for k, (start, _) in self._windows.items() if now - start >= self.window_seconds]
        for k in expired:
            del self._windows[k]

    def reset(self) -> None:
        self._windows.clear()
