"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability.

    Details are for operator-side logs; they are never echoed to callers.
    """

    code: str
    message: str
    hint: str
    http_status: int
    retry_after: float
    timeout_seconds: float
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when client input validation fails."""


class RateLimitAppError(AppError):
    """Raised when a caller exceeds its submission budget."""


class ConfigurationAppError(AppError):
    """Raised when a required operational setting is missing."""


class LedgerAppError(AppError):
    """Raised when the ledger service call fails or does not answer."""
