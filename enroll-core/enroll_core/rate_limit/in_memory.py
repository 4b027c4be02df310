"""
In-Memory Rate Limiter
======================
Fixed-window request counter keyed by caller identity.
"""

import threading
import time
from typing import Callable, Dict, Optional, Tuple

from .models import QuotaDecision


class InMemoryRateLimiter:
    """
    Simple in-memory fixed-window rate limiter.

    State is per process; a restart clears all windows. Buckets from
    earlier windows are dropped the first time the window advances, so
    the map only ever holds keys seen in the current window.
    """

    def __init__(
        self,
        rate: int = 3,
        window: int = 60,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            rate: Number of requests allowed per window
            window: Window size in seconds
            clock: Returns the current Unix time (defaults to time.time)
        """
        if rate < 1 or window < 1:
            raise ValueError("rate and window must be positive")
        self.rate = rate
        self.window = window
        self._clock = clock or time.time
        # key -> (window_start, count)
        self._buckets: Dict[str, Tuple[int, int]] = {}
        self._current_window = 0
        self._lock = threading.Lock()

    def tracked_keys(self) -> int:
        """Number of keys holding a bucket."""
        with self._lock:
            return len(self._buckets)

    def _prune(self, window_start: int) -> None:
        if window_start <= self._current_window:
            return
        self._current_window = window_start
        self._buckets = {
            key: bucket for key, bucket in self._buckets.items()
            if bucket[0] >= window_start
        }

    def check(self, key: str) -> QuotaDecision:
        """
        Check if request is allowed and count it.

        Args:
            key: Unique identifier (e.g., phone number)

        Returns:
            QuotaDecision for the key's current window
        """
        now = self._clock()
        window_start = int(now / self.window) * self.window
        reset_at = window_start + self.window

        with self._lock:
            self._prune(window_start)
            start, used = self._buckets.get(key, (window_start, 0))
            if start < window_start:
                used = 0

            if used >= self.rate:
                return QuotaDecision(
                    key=key,
                    allowed=False,
                    used=used,
                    limit=self.rate,
                    window_start=window_start,
                    reset_at=reset_at,
                    retry_after=max(reset_at - int(now), 1),
                )

            used += 1
            self._buckets[key] = (window_start, used)
            return QuotaDecision(
                key=key,
                allowed=True,
                used=used,
                limit=self.rate,
                window_start=window_start,
                reset_at=reset_at,
            )

    def reset(self, key: str) -> None:
        """Forget the window for a key."""
        with self._lock:
            self._buckets.pop(key, None)
