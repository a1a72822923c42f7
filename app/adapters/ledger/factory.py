"""Factory for ledger client instances."""

from app.adapters.ledger.base import AbstractLedgerClient
from app.adapters.ledger.notion_client import NotionLedgerClient
from app.core.config import settings
from app.core.errors import ConfigurationAppError


def create_ledger_client() -> AbstractLedgerClient:
    """Instantiate the ledger client from current settings.

    Settings are read on every call, so credentials are checked per request
    rather than once at startup.

    Returns:
        AbstractLedgerClient: Configured Notion client.

    Raises:
        ConfigurationAppError: If the token or the database id is missing.
    """
    ledger = settings.ledger

    if not ledger.is_configured:
        raise ConfigurationAppError(
            code="ledger_not_configured",
            message="Notion credentials are not configured",
            details={
                "hint": "Set NOTION_TOKEN and NOTION_DATABASE_ID environment variables",
                "context": {
                    "token_present": bool(ledger.token),
                    "database_id_present": bool(ledger.database_id),
                },
            },
        )

    return NotionLedgerClient(
        token=ledger.token,
        database_id=ledger.database_id,
        base_url=ledger.api_base_url,
        api_version=ledger.api_version,
        timeout_seconds=ledger.timeout_seconds,
        probe_timeout_seconds=ledger.probe_timeout_seconds,
    )
