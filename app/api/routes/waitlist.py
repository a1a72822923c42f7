from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.adapters.ledger.factory import create_ledger_client
from app.core.config import settings
from app.core.rate_limit import get_rate_limiter
from app.schemas.waitlist import WaitlistRequest, WaitlistResponse
from app.services.waitlist_service import SubmissionOutcome, SubmissionResult, WaitlistService

router = APIRouter(tags=["Waitlist"])


def get_waitlist_service() -> WaitlistService:
    """Build the submission service around the process-wide limiter."""
    limiter = get_rate_limiter() if settings.app.rate_limit_enabled else None
    return WaitlistService(rate_limiter=limiter, ledger_factory=create_ledger_client)


def _rate_limit_headers(result: SubmissionResult) -> dict[str, str]:
    if not settings.app.rate_limit_include_headers:
        return {}
    if result.outcome is not SubmissionOutcome.RATE_LIMITED or not result.rate_limit:
        return {}
    return {
        "Retry-After": str(result.retry_after_seconds or 0),
        "X-RateLimit-Limit": str(result.rate_limit["limit"]),
        "X-RateLimit-Remaining": str(result.rate_limit["remaining"]),
        "X-RateLimit-Reset": str(result.rate_limit["reset_at"]),
    }


@router.post(
    "/waitlist",
    response_model=WaitlistResponse,
    responses={
        400: {"model": WaitlistResponse},
        408: {"model": WaitlistResponse},
        429: {"model": WaitlistResponse},
        500: {"model": WaitlistResponse},
    },
)
async def join_waitlist(
    service: Annotated[WaitlistService, Depends(get_waitlist_service)],
    body: WaitlistRequest | None = None,
) -> JSONResponse:
    """Add an email to the waitlist.

    Validates the submission, applies the per-email rate limit and records the
    entry in the ledger. Every outcome is returned as
    ``{"success": bool, "message": str}`` with a matching status code.
    """
    body = body or WaitlistRequest()
    result = await service.submit(body.email, body.role)
    content = WaitlistResponse(success=result.success, message=result.message)
    return JSONResponse(
        status_code=result.status_code,
        content=content.model_dump(),
        headers=_rate_limit_headers(result) or None,
    )
