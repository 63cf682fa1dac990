"""Sliding-window admission control for remote Gemini calls.

:class:`RateLimiter` keeps the timestamps of calls admitted during the
trailing 60 seconds.  Each admission check first prunes expired timestamps,
then either records the new call or rejects it with the time remaining until
the oldest recorded call leaves the window.

This is a counter over a pruned window, not a token bucket: up to
``max_per_minute`` calls may be admitted back to back.

Usage
-----
::

    limiter = RateLimiter(max_per_minute=10)
    limiter.admit()  # raises RateLimitExceeded when the window is full
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from collections.abc import Callable

from .exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)

WINDOW_MS = 60_000


def _now_ms() -> int:
    return int(time.time() * 1000)


class RateLimiter:
    """Per-client sliding one-minute admission counter.

    Attributes:
        max_per_minute: Maximum admissions in any trailing 60 second window.
    """

    def __init__(self, max_per_minute: int, clock: Callable[[], int] = _now_ms) -> None:
        """Initialise an empty limiter.

        Args:
            max_per_minute: Window capacity.  Must be at least 1.
            clock: Callable returning the current time in milliseconds since
                the epoch.  Tests pass a fake clock.
        """
        if max_per_minute < 1:
            raise ValueError(f"max_per_minute must be at least 1, got {max_per_minute}")
        self.max_per_minute = max_per_minute
        self._clock = clock
        self._timestamps: deque[int] = deque()
        # Admission is a read-modify-write on _timestamps.
        self._lock = threading.Lock()

    def admit(self) -> None:
        """Admit one call or reject it.

        Raises:
            RateLimitExceeded: If the window already holds ``max_per_minute``
                admissions.  ``retry_after_ms`` is the time until the oldest
                of them expires.
        """
        with self._lock:
            now = self._clock()
            self._prune(now)

            if len(self._timestamps) >= self.max_per_minute:
                retry_after_ms = WINDOW_MS - (now - self._timestamps[0])
                logger.warning(
                    f"Rate limit reached ({len(self._timestamps)} calls in window); "
                    f"retry in {retry_after_ms} ms"
                )
                raise RateLimitExceeded(retry_after_ms)

            self._timestamps.append(now)
            logger.debug(f"Admitted call {len(self._timestamps)}/{self.max_per_minute}")

    def in_window(self) -> int:
        """Return how many admissions are currently inside the window."""
        with self._lock:
            self._prune(self._clock())
            return len(self._timestamps)

    def _prune(self, now: int) -> None:
        cutoff = now - WINDOW_MS
        # Timestamps are appended in clock order, so expired ones are at the front.
        while self._timestamps and self._timestamps[0] <= cutoff:
            self._timestamps.popleft()
