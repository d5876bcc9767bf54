"""
In-memory fixed-window rate limiter.

Used to throttle per-user actions (company creation, message sends) inside a
single process. It is not shared between workers and is not persisted; the
database RPCs remain the authority for anything that must hold.
"""

import math
import time
from typing import Callable, Dict, Optional

from cando.core.errors import RateLimitError


def _now_ms() -> float:
    return time.monotonic() * 1000


class RateLimiter:
    def __init__(
        self,
        default_limit: int = 100,
        default_window_ms: int = 60000,
        clock: Optional[Callable[[], float]] = None
    ):
        self.default_limit = default_limit
        self.default_window_ms = default_window_ms
        self._clock = clock or _now_ms
        self._entries: Dict[str, Dict[str, float]] = {}
        self._next_prune = 0.0

    def is_rate_limited(
        self,
        key: str,
        limit: Optional[int] = None,
        window_ms: Optional[int] = None
    ) -> bool:
        """Count one request for key; True once more than `limit` landed in the current window."""
        limit = self.default_limit if limit is None else limit
        window_ms = self.default_window_ms if window_ms is None else window_ms
        now = self._clock()
        self._prune(now)
        entry = self._entries.get(key)

        if entry is None or now > entry["reset_time"]:
            self._entries[key] = {"count": 1, "reset_time": now + window_ms}
            return False

        entry["count"] += 1
        return entry["count"] > limit

    def _prune(self, now: float):
        """Drop expired windows, at most once per default window"""
        if now < self._next_prune:
            return
        expired = [key for key, entry in self._entries.items() if now > entry["reset_time"]]
        for key in expired:
            del self._entries[key]
        self._next_prune = now + self.default_window_ms

    def get_remaining_requests(self, key: str) -> int:
        entry = self._entries.get(key)
        if entry is None or self._clock() > entry["reset_time"]:
            return self.default_limit
        return max(0, self.default_limit - int(entry["count"]))

    def get_reset_time(self, key: str) -> float:
        now = self._clock()
        entry = self._entries.get(key)
        if entry is None or now > entry["reset_time"]:
            return now + self.default_window_ms
        return entry["reset_time"]

    def clear(self):
        self._entries.clear()
        self._next_prune = 0.0

    @staticmethod
    def generate_key(action: str, user_id: str) -> str:
        return f"{action}:{user_id}"

    def enforce(self, key: str, limit: Optional[int] = None, window_ms: Optional[int] = None) -> None:
        """Raise RateLimitError when key is over its limit"""
        if self.is_rate_limited(key, limit, window_ms):
            reset_time = self.get_reset_time(key)
            retry_after = max(1, math.ceil((reset_time - self._clock()) / 1000))
            raise RateLimitError(reset_time=reset_time, retry_after=retry_after)


rate_limiter = RateLimiter()
