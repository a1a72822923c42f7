"""Read-only connectivity check against the ledger service."""

from __future__ import annotations

import logging
from typing import Any, Callable

from app.adapters.ledger.base import AbstractLedgerClient
from app.core.errors import ConfigurationAppError, LedgerAppError
from app.schemas.waitlist import LedgerDatabaseInfo, LedgerProbeResponse

logger = logging.getLogger(__name__)


def _database_title(database: dict[str, Any]) -> str:
    fragments = database.get("title") or []
    if fragments and isinstance(fragments[0], dict):
        content = (fragments[0].get("text") or {}).get("content")
        if content:
            return content
    return "Untitled"


async def probe_ledger(
    ledger_factory: Callable[[], AbstractLedgerClient],
) -> tuple[int, LedgerProbeResponse]:
    """Read the target database metadata to verify credentials and target.

    Args:
        ledger_factory: Callable returning a configured ledger client.

    Returns:
        Tuple of (HTTP status code, probe response).
    """
    try:
        ledger = ledger_factory()
    except ConfigurationAppError:
        logger.error("ledger_probe.not_configured")
        return 500, LedgerProbeResponse(
            success=False,
            message="Notion credentials not configured",
        )

    try:
        database = await ledger.retrieve_database()
    except LedgerAppError as exc:
        logger.error(
            "ledger_probe.failed",
            extra={"error_code": exc.code, "error_details": exc.details},
        )
        return 500, LedgerProbeResponse(
            success=False,
            message="Notion connection failed",
            error=exc.message,
        )

    logger.info("ledger_probe.succeeded", extra={"database_id": database.get("id")})
    return 200, LedgerProbeResponse(
        success=True,
        message="Notion connection successful",
        database=LedgerDatabaseInfo(title=_database_title(database), id=database.get("id")),
    )
