"""Rate limiter interfaces.

The service layer depends on this abstraction (not the concrete
implementation) so the storage backend can be swapped later (e.g., Redis).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit consume operation.

    Attributes:
        allowed: Whether the submission is allowed to proceed.
        limit: Max submissions per window.
        remaining: Remaining submissions in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the current window expires.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for per-identity rate limiters."""

    @abstractmethod
    def consume(self, key: str) -> RateLimitResult:
        """Record an attempt for ``key`` and decide whether it is allowed.

        Args:
            key: Normalized identity (callers lower-case emails first).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def evict_expired(self) -> int:
        """Drop entries whose window has elapsed.

        Returns:
            Number of entries removed.
        """
        raise NotImplementedError

    def is_rate_limited(self, key: str) -> bool:
        """Record an attempt and return True when it must be rejected."""
        return not self.consume(key).allowed
