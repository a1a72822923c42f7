"""Process-wide rate limiter wiring.

This module owns the limiter instance shared by all requests of the serving
process and the helpers used to key and log it.

Rate limiting strategy:
- Fixed window per identity (lower-cased email), anchored at the first
  submission of the window.
- Per-process, best effort: multiple workers each keep their own counters.
"""

from __future__ import annotations

import hashlib

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.core.config import settings


_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int] | None = None


def get_rate_limiter() -> AbstractRateLimiter:
    """Return a process-wide rate limiter instance.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt.

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """

    global _limiter, _limiter_config

    config = (
        settings.app.rate_limit_max_submissions_per_identity,
        settings.app.rate_limit_window_ms,
    )

    if _limiter is None or _limiter_config != config:
        _limiter = InMemoryFixedWindowRateLimiter(
            limit=settings.app.rate_limit_max_submissions_per_identity,
            window_seconds=settings.app.rate_limit_window_ms / 1000,
        )
        _limiter_config = config

    return _limiter


def normalize_identity(email: str) -> str:
    """Build the limiter key for an email address."""
    return email.lower()


def hash_identity(identity: str) -> str:
    """Hash an identity for logging without exposing the address."""
    return hashlib.sha256(identity.encode()).hexdigest()[:16]
