"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: the check-and-increment runs under a lock.
- Windows are anchored at an identity's first submission, not at epoch
  boundaries.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


@dataclass
class _WindowState:
    window_start: float
    count: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting submissions per key within a fixed window.

    The first submission of a key opens a window of ``window_seconds``. Up to
    ``limit`` submissions are allowed inside it; further ones are rejected
    without being counted. The first submission after the window has elapsed
    opens a new window with a count of one.

    Expired entries are swept at most once per ``sweep_interval_seconds``
    during ``consume`` so memory does not grow with every identity ever seen.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
        sweep_interval_seconds: float | None = None,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of submissions per window.
            window_seconds: Length of the window in seconds.
            clock: Time source function returning UNIX time in seconds.
            sweep_interval_seconds: Minimum delay between two eviction sweeps
                (defaults to the window length).

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._sweep_interval = (
            window_seconds if sweep_interval_seconds is None else sweep_interval_seconds
        )
        self._lock = threading.RLock()
        self._state_by_key: dict[str, _WindowState] = {}
        self._last_sweep = clock()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def __len__(self) -> int:
        with self._lock:
            return len(self._state_by_key)

    def _is_expired(self, state: _WindowState, now: float) -> bool:
        return now - state.window_start > self._window_seconds

    def _reset_at(self, state: _WindowState) -> int:
        return int(math.ceil(state.window_start + self._window_seconds))

    def _allowed(self, state: _WindowState) -> RateLimitResult:
        return RateLimitResult(
            allowed=True,
            limit=self._limit,
            remaining=max(0, self._limit - state.count),
            reset_at=self._reset_at(state),
            retry_after_seconds=None,
        )

    def _blocked(self, state: _WindowState, now: float) -> RateLimitResult:
        window_end = state.window_start + self._window_seconds
        return RateLimitResult(
            allowed=False,
            limit=self._limit,
            remaining=0,
            reset_at=self._reset_at(state),
            retry_after_seconds=max(1, int(math.ceil(window_end - now))),
        )

    def _evict_expired_locked(self, now: float) -> int:
        expired = [k for k, s in self._state_by_key.items() if self._is_expired(s, now)]
        for key in expired:
            del self._state_by_key[key]
        self._last_sweep = now
        if expired:
            logger.debug(
                "rate_limit.evicted",
                extra={"evicted": len(expired), "tracked": len(self._state_by_key)},
            )
        return len(expired)

    def evict_expired(self) -> int:
        with self._lock:
            return self._evict_expired_locked(self._clock())

    def consume(self, key: str) -> RateLimitResult:
        """Record a submission for ``key``.

        The lookup, the window check and the increment happen under one lock
        acquisition, so concurrent callers for the same key cannot both slip
        under the limit.

        Args:
            key: Normalized identity.

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self._sweep_interval:
                self._evict_expired_locked(now)

            state = self._state_by_key.get(key)

            if state is None or self._is_expired(state, now):
                state = _WindowState(window_start=now, count=1)
                self._state_by_key[key] = state
                return self._allowed(state)

            if state.count >= self._limit:
                # Blocked attempts are not counted.
                return self._blocked(state, now)

            state.count += 1
            return self._allowed(state)
