import math
import threading
import time
from typing import Callable, Dict


class EmailThrottle:
    """Advisory per-email throttle: remembers when each email last hit an endpoint.

    Kept in process memory only, so it resets on restart and is not shared
    between workers. Entries older than the interval are pruned on every write.
    """

    def __init__(self, min_interval_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.min_interval_seconds = min_interval_seconds
        self._clock = clock
        self._last_request: Dict[str, float] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(email: str) -> str:
        return email.strip().lower()

    def _remaining(self, key: str, now: float) -> int:
        last_at = self._last_request.get(key)
        if last_at is None:
            return 0
        remaining = self.min_interval_seconds - (now - last_at)
        return math.ceil(remaining) if remaining > 0 else 0

    def _prune(self, now: float) -> None:
        expired = [
            key for key, last_at in self._last_request.items()
            if now - last_at >= self.min_interval_seconds
        ]
        for key in expired:
            del self._last_request[key]

    def retry_after(self, email: str) -> int:
        """Seconds (rounded up) the caller must still wait; 0 when allowed."""
        with self._lock:
            return self._remaining(self._key(email), self._clock())

    def try_acquire(self, email: str) -> int:
        """Check and mark in one step. Returns 0 when the slot was taken, else the wait in seconds."""
        key = self._key(email)
        with self._lock:
            now = self._clock()
            wait_seconds = self._remaining(key, now)
            if wait_seconds:
                return wait_seconds
            self._prune(now)
            self._last_request[key] = now
            return 0

    def mark(self, email: str) -> None:
        with self._lock:
            now = self._clock()
            self._prune(now)
            self._last_request[self._key(email)] = now

    def release(self, email: str) -> None:
        """Give back a slot taken by try_acquire when the request did not go through"""
        with self._lock:
            self._last_request.pop(self._key(email), None)

    def clear(self) -> None:
        with self._lock:
            self._last_request.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_request)
