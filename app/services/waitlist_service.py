"""Waitlist submission pipeline.

This service is the core business logic that turns a raw sign-up into a
recorded ledger page or a sanitized rejection. It handles:
- Presence, email format and role validation
- Per-identity rate limiting
- Mapping to the ledger page schema and the remote write
- Translation of every failure into a client-facing outcome
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Callable

from app.adapters.ledger.base import AbstractLedgerClient
from app.adapters.rate_limit.base import AbstractRateLimiter
from app.core.errors import (
    AppError,
    ConfigurationAppError,
    LedgerAppError,
    RateLimitAppError,
    ValidationAppError,
)
from app.core.rate_limit import hash_identity, normalize_identity

logger = logging.getLogger(__name__)

# ECMAScript whitespace; Python's \s differs (U+FEFF, U+001C-U+001F, U+0085).
_WHITESPACE = re.escape(
    "".join(
        chr(code_point)
        for code_point in (
            0x09, 0x0A, 0x0B, 0x0C, 0x0D, 0x20, 0xA0, 0x1680,
            *range(0x2000, 0x200B),
            0x2028, 0x2029, 0x202F, 0x205F, 0x3000, 0xFEFF,
        )
    )
)
EMAIL_PATTERN = re.compile(rf"[^{_WHITESPACE}@]+@[^{_WHITESPACE}@]+\.[^{_WHITESPACE}@]+")

VALID_ROLES: tuple[str, ...] = (
    "Student / Learner",
    "Tutor / Teacher",
    "School / Institute",
    "Developer / Researcher",
)


class SubmissionOutcome(str, Enum):
    """Every way a submission can end, with its status and public message."""

    ACCEPTED = "accepted"
    MISSING_FIELDS = "missing_fields"
    INVALID_EMAIL = "invalid_email"
    RATE_LIMITED = "rate_limited"
    INVALID_ROLE = "invalid_role"
    SERVER_MISCONFIGURED = "server_misconfigured"
    UPSTREAM_REJECTED_FORMAT = "upstream_rejected_format"
    UPSTREAM_AUTH_ERROR = "upstream_auth_error"
    UPSTREAM_TARGET_MISSING = "upstream_target_missing"
    UPSTREAM_BUSY = "upstream_busy"
    UPSTREAM_UNKNOWN_ERROR = "upstream_unknown_error"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    NETWORK_ERROR = "network_error"

    @property
    def status_code(self) -> int:
        return _OUTCOME_RESPONSES[self][0]

    @property
    def message(self) -> str:
        return _OUTCOME_RESPONSES[self][1]


_OUTCOME_RESPONSES: dict[SubmissionOutcome, tuple[int, str]] = {
    SubmissionOutcome.ACCEPTED: (200, "Successfully added to waitlist! We'll be in touch soon."),
    SubmissionOutcome.MISSING_FIELDS: (400, "Email and role are required"),
    SubmissionOutcome.INVALID_EMAIL: (400, "Please enter a valid email address"),
    SubmissionOutcome.RATE_LIMITED: (429, "Too many submissions. Please try again later."),
    SubmissionOutcome.INVALID_ROLE: (400, "Invalid role selected"),
    SubmissionOutcome.SERVER_MISCONFIGURED: (
        500,
        "Server configuration error. Please contact support.",
    ),
    SubmissionOutcome.UPSTREAM_REJECTED_FORMAT: (400, "Invalid request format. Please try again."),
    SubmissionOutcome.UPSTREAM_AUTH_ERROR: (
        500,
        "Server authentication error. Please contact support.",
    ),
    SubmissionOutcome.UPSTREAM_TARGET_MISSING: (
        500,
        "Database configuration error. Please contact support.",
    ),
    SubmissionOutcome.UPSTREAM_BUSY: (429, "Server is busy. Please try again in a moment."),
    SubmissionOutcome.UPSTREAM_UNKNOWN_ERROR: (500, "Something went wrong. Please try again."),
    SubmissionOutcome.UPSTREAM_TIMEOUT: (408, "Request timeout. Please try again."),
    SubmissionOutcome.NETWORK_ERROR: (
        500,
        "Network error. Please check your connection and try again.",
    ),
}

_UPSTREAM_STATUS_OUTCOMES: dict[int, SubmissionOutcome] = {
    400: SubmissionOutcome.UPSTREAM_REJECTED_FORMAT,
    401: SubmissionOutcome.UPSTREAM_AUTH_ERROR,
    404: SubmissionOutcome.UPSTREAM_TARGET_MISSING,
    429: SubmissionOutcome.UPSTREAM_BUSY,
}

_CLIENT_OUTCOMES = {
    SubmissionOutcome.MISSING_FIELDS,
    SubmissionOutcome.INVALID_EMAIL,
    SubmissionOutcome.INVALID_ROLE,
}
_THROTTLED_OUTCOMES = {SubmissionOutcome.RATE_LIMITED, SubmissionOutcome.UPSTREAM_BUSY}


@dataclass(frozen=True)
class SubmissionResult:
    """Result handed back to the HTTP layer."""

    outcome: SubmissionOutcome
    retry_after_seconds: int | None = None
    rate_limit: dict[str, int] | None = None

    @property
    def success(self) -> bool:
        return self.outcome is SubmissionOutcome.ACCEPTED

    @property
    def status_code(self) -> int:
        return self.outcome.status_code

    @property
    def message(self) -> str:
        return self.outcome.message


def is_valid_email(email: str) -> bool:
    """Check the basic ``local@domain.tld`` shape (no whitespace, one ``@``)."""
    return EMAIL_PATTERN.fullmatch(email) is not None


def classify_ledger_error(exc: LedgerAppError) -> SubmissionOutcome:
    """Map a ledger failure to the outcome reported to the caller."""
    if exc.code == "ledger_timeout":
        return SubmissionOutcome.UPSTREAM_TIMEOUT
    if exc.code == "ledger_network_error":
        return SubmissionOutcome.NETWORK_ERROR

    status = (exc.details or {}).get("http_status")
    return _UPSTREAM_STATUS_OUTCOMES.get(status, SubmissionOutcome.UPSTREAM_UNKNOWN_ERROR)


def build_page_payload(
    database_id: str,
    email: str,
    role: str,
    submitted_on: date,
) -> dict[str, Any]:
    """Build the Notion page body for an accepted submission.

    Args:
        database_id: Parent database receiving the page.
        email: Submitted email, used both as page title and email property.
        role: Submitted role, stored as a single-select option.
        submitted_on: Calendar date of acceptance.

    Returns:
        Page creation payload.
    """
    return {
        "parent": {"database_id": database_id},
        "properties": {
            "Name": {"title": [{"text": {"content": email}}]},
            "Email": {"email": email},
            "Role": {"select": {"name": role}},
            "SubmitAt": {"date": {"start": submitted_on.isoformat()}},
        },
    }


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class WaitlistService:
    """Service accepting waitlist submissions.

    Attributes:
        rate_limiter: Per-identity limiter, or None to disable limiting.
        ledger_factory: Callable returning a ledger client; raises
            ConfigurationAppError when credentials are missing.
        today: Clock returning the acceptance date.
    """

    def __init__(
        self,
        rate_limiter: AbstractRateLimiter | None,
        ledger_factory: Callable[[], AbstractLedgerClient],
        today: Callable[[], date] = _utc_today,
    ) -> None:
        self.rate_limiter = rate_limiter
        self.ledger_factory = ledger_factory
        self.today = today

    def _validate_fields(self, email: str | None, role: str | None) -> None:
        if not email or not role:
            raise ValidationAppError(
                code=SubmissionOutcome.MISSING_FIELDS.value,
                message="email and role are required",
                details={"context": {"email_present": bool(email), "role_present": bool(role)}},
            )
        if not is_valid_email(email):
            raise ValidationAppError(
                code=SubmissionOutcome.INVALID_EMAIL.value,
                message="email does not match the expected pattern",
            )

    def _enforce_rate_limit(self, identity: str) -> dict[str, int] | None:
        if self.rate_limiter is None:
            return None

        result = self.rate_limiter.consume(identity)
        info = {"limit": result.limit, "remaining": result.remaining, "reset_at": result.reset_at}
        if not result.allowed:
            raise RateLimitAppError(
                code=SubmissionOutcome.RATE_LIMITED.value,
                message="submission budget exhausted for identity",
                details={"retry_after": result.retry_after_seconds or 0, "context": info},
            )
        return info

    def _validate_role(self, role: str) -> None:
        if role not in VALID_ROLES:
            raise ValidationAppError(
                code=SubmissionOutcome.INVALID_ROLE.value,
                message="role is not one of the accepted values",
            )

    def _get_ledger(self) -> AbstractLedgerClient:
        try:
            return self.ledger_factory()
        except ConfigurationAppError as exc:
            raise ConfigurationAppError(
                code=SubmissionOutcome.SERVER_MISCONFIGURED.value,
                message=exc.message,
                details=exc.details,
            ) from exc

    def _log_rejection(self, outcome: SubmissionOutcome, exc: AppError, identity_hash: str | None) -> None:
        extra = {
            "outcome": outcome.value,
            "status_code": outcome.status_code,
            "identity_hash": identity_hash,
            "error_code": exc.code,
        }
        if outcome in _CLIENT_OUTCOMES:
            logger.info("waitlist.rejected", extra=extra)
        elif outcome in _THROTTLED_OUTCOMES:
            logger.warning("waitlist.throttled", extra=extra)
        else:
            logger.error(
                "waitlist.failed",
                extra={**extra, "error_message": exc.message, "error_details": exc.details},
            )

    async def submit(self, email: str | None, role: str | None) -> SubmissionResult:
        """Validate, rate-limit and record a waitlist submission.

        Steps run in a fixed order and the first failure wins: presence,
        email format, rate limit, role, ledger configuration, remote write.
        No step is retried.

        Args:
            email: Submitted email address.
            role: Submitted role.

        Returns:
            SubmissionResult describing the outcome. Domain failures never
            propagate out of this method.
        """
        identity_hash: str | None = None
        rate_limit_info: dict[str, int] | None = None

        try:
            self._validate_fields(email, role)
            identity = normalize_identity(email)
            identity_hash = hash_identity(identity)
            rate_limit_info = self._enforce_rate_limit(identity)
            self._validate_role(role)

            ledger = self._get_ledger()
            payload = build_page_payload(ledger.database_id, email, role, self.today())
            await ledger.create_page(payload)
        except LedgerAppError as exc:
            outcome = classify_ledger_error(exc)
            self._log_rejection(outcome, exc, identity_hash)
            return SubmissionResult(outcome=outcome, rate_limit=rate_limit_info)
        except AppError as exc:
            outcome = SubmissionOutcome(exc.code)
            self._log_rejection(outcome, exc, identity_hash)
            retry_after = None
            if isinstance(exc, RateLimitAppError):
                retry_after = int((exc.details or {}).get("retry_after", 0))
                rate_limit_info = (exc.details or {}).get("context")
            return SubmissionResult(
                outcome=outcome,
                retry_after_seconds=retry_after,
                rate_limit=rate_limit_info,
            )

        logger.info(
            "waitlist.accepted",
            extra={"identity_hash": identity_hash, "role": role},
        )
        return SubmissionResult(outcome=SubmissionOutcome.ACCEPTED, rate_limit=rate_limit_info)
