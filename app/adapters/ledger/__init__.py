"""Ledger adapter layer - abstracts over the external system of record."""

from app.adapters.ledger.base import AbstractLedgerClient
from app.adapters.ledger.factory import create_ledger_client
from app.adapters.ledger.notion_client import NotionLedgerClient

__all__ = [
    "AbstractLedgerClient",
    "NotionLedgerClient",
    "create_ledger_client",
]
