"""Call spacing for the dispatcher and the translation providers."""

import asyncio
from collections import deque
from datetime import datetime, timedelta
from typing import Optional, Tuple


class RateLimiter:
    """
    Sliding window over the timestamps of allowed calls.

    A call made exactly `period` after an earlier one no longer counts that
    earlier one, so with max_calls=1 consecutive allowed calls are spaced by
    at least `period`.
    """

    def __init__(self, max_calls: int, period: timedelta):
        self.max_calls = max_calls
        self.period = period
        self._window: deque[datetime] = deque()

    def _expire(self, now: datetime):
        cutoff = now - self.period
        while self._window and self._window[0] <= cutoff:
            self._window.popleft()

    def time_until_free(self, now: Optional[datetime] = None) -> Optional[timedelta]:
        """None when a slot is free at `now`, otherwise how long until one is."""
        now = now or datetime.now()
        self._expire(now)
        if len(self._window) < self.max_calls:
            return None
        return self._window[0] + self.period - now

    def record(self, now: Optional[datetime] = None):
        self._window.append(now or datetime.now())

    def check(self, now: Optional[datetime] = None) -> Tuple[bool, Optional[timedelta]]:
        """
        Try to take a slot at `now` (default: the current time).

        Returns (True, None) and records the call when a slot is free,
        otherwise (False, how long until the oldest call leaves the window).
        """
        now = now or datetime.now()
        wait = self.time_until_free(now)
        if wait is not None:
            return False, wait
        self.record(now)
        return True, None

    async def wait(self):
        """Sleep until a slot is free without taking it."""
        while True:
            wait = self.time_until_free()
            if wait is None:
                return
            await asyncio.sleep(wait.total_seconds())

    @property
    def last_call(self) -> Optional[datetime]:
        return self._window[-1] if self._window else None

    def reset(self):
        self._window.clear()
