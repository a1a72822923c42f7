"""Pydantic schemas for the waitlist and probe endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class WaitlistRequest(BaseModel):
    """Inbound waitlist sign-up.

    Fields are optional here; presence, format and role checks belong to the
    submission pipeline so they run in a fixed order.
    """

    email: str | None = Field(default=None, description="Email address to add to the waitlist.")
    role: str | None = Field(default=None, description="Self-declared role of the applicant.")


class WaitlistResponse(BaseModel):
    """Outcome of a waitlist submission."""

    success: bool = Field(..., description="True when the sign-up was recorded.")
    message: str = Field(..., description="Human-readable outcome, safe to show to end users.")


class HealthResponse(BaseModel):
    """Liveness and configuration status."""

    status: str = Field(..., description="Always 'OK' while the process serves requests.")
    message: str
    timestamp: str = Field(..., description="ISO-8601 UTC time of the check.")
    configured: bool = Field(
        ..., description="True when both ledger credentials are present."
    )
    version: str


class LedgerDatabaseInfo(BaseModel):
    title: str
    id: str | None = None


class LedgerProbeResponse(BaseModel):
    """Result of the read-only ledger connectivity probe."""

    success: bool
    message: str
    database: LedgerDatabaseInfo | None = None
    error: str | None = None
