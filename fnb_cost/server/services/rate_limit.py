"""
In-process sliding-window rate limiting for login and password resets.

Buckets live in process memory, so each worker enforces its own limits and a
restart clears them.
"""

from __future__ import annotations

import time
from typing import Dict, List, Optional


class SlidingWindowLimiter:
    def __init__(self) -> None:
        self._buckets: Dict[str, List[float]] = {}

    def allow(self, key: str, limit: int, window_seconds: int, *, now: Optional[float] = None) -> bool:
        """Record an attempt for ``key`` unless ``limit`` attempts already fall inside the window.

        Rejected attempts are not recorded, so a blocked caller regains access
        as soon as its oldest attempt leaves the window.
        """
        now = time.time() if now is None else now
        window_start = now - window_seconds
        bucket = [ts for ts in self._buckets.get(key, []) if ts > window_start]
        if len(bucket) >= limit:
            self._buckets[key] = bucket
            return False
        bucket.append(now)
        self._buckets[key] = bucket
        return True

    def retry_after(self, key: str, window_seconds: int, *, now: Optional[float] = None) -> int:
        """Whole seconds until the oldest attempt for ``key`` expires."""
        bucket = self._buckets.get(key)
        if not bucket:
            return 0
        now = time.time() if now is None else now
        return max(0, int(bucket[0] + window_seconds - now) + 1)

    def reset(self) -> None:
        self._buckets.clear()


limiter = SlidingWindowLimiter()
