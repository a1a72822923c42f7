"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment variables are set before any app import so the global settings
object sees them.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("NOTION_TOKEN", "secret_test_token")
os.environ.setdefault("NOTION_DATABASE_ID", "db-test-123")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402

from app.adapters.ledger.base import AbstractLedgerClient  # noqa: E402


class FakeLedger(AbstractLedgerClient):
    """In-memory ledger recording created pages or raising a preset error."""

    def __init__(self, error: Exception | None = None, database_id: str = "db-123") -> None:
        self.database_id = database_id
        self.error = error
        self.pages: list[dict[str, Any]] = []

    async def create_page(self, payload: dict[str, Any]) -> dict[str, Any]:
        if self.error is not None:
            raise self.error
        self.pages.append(payload)
        return {"object": "page", "id": f"page-{len(self.pages)}"}

    async def retrieve_database(self) -> dict[str, Any]:
        if self.error is not None:
            raise self.error
        return {"object": "database", "id": self.database_id, "title": []}


@pytest.fixture
def fake_ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def fixed_today() -> date:
    return date(2026, 3, 14)


@pytest.fixture
def make_fake_ledger():
    """Factory for ledgers preset with an error."""

    def _make(error: Exception | None = None) -> FakeLedger:
        return FakeLedger(error=error)

    return _make
