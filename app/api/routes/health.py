from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.adapters.ledger.factory import create_ledger_client
from app.core.config import settings
from app.schemas.waitlist import HealthResponse, LedgerProbeResponse
from app.services.ledger_probe_service import probe_ledger

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint.

    Reports liveness and whether the ledger credentials are configured.
    Used by load balancers and monitoring systems to determine service health.
    """

    return HealthResponse(
        status="OK",
        message=f"{settings.app.service_name} backend is running",
        timestamp=datetime.now(timezone.utc).isoformat(),
        configured=settings.ledger.is_configured,
        version=settings.app.version,
    )


@router.get(
    "/test-notion",
    response_model=LedgerProbeResponse,
    responses={500: {"model": LedgerProbeResponse}},
)
async def test_ledger_connection() -> JSONResponse:
    """Probe the ledger service by reading the target database metadata."""

    status_code, result = await probe_ledger(create_ledger_client)
    return JSONResponse(
        status_code=status_code,
        content=result.model_dump(exclude_none=True),
    )
