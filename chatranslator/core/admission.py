import threading
from typing import Optional


class InFlightRegistry:
    """
    Tracks content strings with a translation queued or in flight, and who sent them.

    The admission set guarantees at most one pending request per content string.
    The sender index is consumed exactly once, when the result is resolved.
    Both live behind one lock so producers and the dispatcher never see them
    out of step.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._admitted: set[str] = set()
        self._senders: dict[str, str] = {}

    def try_admit(self, content: str) -> bool:
        """Insert content if absent. False means it is already pending."""
        with self._lock:
            if content in self._admitted:
                return False
            self._admitted.add(content)
            return True

    def record_sender(self, content: str, sender: str):
        with self._lock:
            self._senders[content] = sender

    def admit(self, content: str, sender: Optional[str] = None) -> bool:
        """try_admit and record_sender under a single lock acquisition.

        The sender is upserted even when content is already pending, so
        identical text from two players is attributed to the latest one.
        """
        with self._lock:
            admitted = content not in self._admitted
            if admitted:
                self._admitted.add(content)
            if sender is not None:
                self._senders[content] = sender
            return admitted

    def resolve(self, content: str) -> Optional[str]:
        """Release content and hand back its sender, if one was recorded."""
        with self._lock:
            self._admitted.discard(content)
            return self._senders.pop(content, None)

    def is_admitted(self, content: str) -> bool:
        with self._lock:
            return content in self._admitted

    def sender_of(self, content: str) -> Optional[str]:
        with self._lock:
            return self._senders.get(content)

    def __len__(self):
        with self._lock:
            return len(self._admitted)
