"""Process-wide rolling-window admission gate."""

import threading
import time
from collections import deque
from collections.abc import Callable
from functools import lru_cache

DEFAULT_KEY = "allstack-api"
WINDOW_SECONDS = 60.0


class RateLimiter:
    """Counts attempts per key over a rolling window.

    Safe to share across threads; every ``allow`` call that returns True
    consumes one slot of the key's budget.
    """

    def __init__(
        self,
        *,
        window_seconds: float = WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._attempts: dict[str, deque[float]] = {}

    def _prune(self, key: str, now: float) -> deque[float]:
        attempts = self._attempts.setdefault(key, deque())
        while attempts and now - attempts[0] >= self.window_seconds:
            attempts.popleft()
        return attempts

    def allow(self, key: str, max_per_window: int) -> bool:
        with self._lock:
            now = self._clock()
            attempts = self._prune(key, now)
            if len(attempts) >= max_per_window:
                return False
            attempts.append(now)
            return True

    def remaining(self, key: str, max_per_window: int) -> int:
        with self._lock:
            attempts = self._prune(key, self._clock())
            return max(0, max_per_window - len(attempts))

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._attempts.clear()
            else:
                self._attempts.pop(key, None)


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    return RateLimiter()
