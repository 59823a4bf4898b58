import threading
from collections import deque
from datetime import datetime, timedelta
from typing import Optional

from chatranslator.core.models import TranslationRequest
from chatranslator.utils.rate_limiter import RateLimiter


class RequestQueue:
    """
    Unbounded FIFO of translation requests behind a call-spacing gate.

    The gate bounds how often a call may *start*; it does not wait for the
    previous call to finish.
    """

    def __init__(self, min_interval: float):
        self.min_interval = timedelta(seconds=min_interval)
        self.limiter = RateLimiter(max_calls=1, period=self.min_interval)
        self._lock = threading.Lock()
        self._items: deque[TranslationRequest] = deque()

    def enqueue(self, content: str, immediate: bool, attempt: int = 1) -> TranslationRequest:
        request = TranslationRequest(content=content, immediate=immediate, attempt=attempt)
        with self._lock:
            self._items.append(request)
        return request

    def try_dequeue(self, now: Optional[datetime] = None) -> Optional[TranslationRequest]:
        """Pop the oldest request if the queue is non-empty and the gate is open.

        A successful pop records `now` as the last call time.
        """
        with self._lock:
            if not self._items:
                return None
            allowed, _ = self.limiter.check(now)
            if not allowed:
                return None
            return self._items.popleft()

    def pending(self) -> list[TranslationRequest]:
        with self._lock:
            return list(self._items)

    def __len__(self):
        with self._lock:
            return len(self._items)
