"""Tests for the Notion ledger client and its factory."""

import asyncio
import json
import time

import httpx
import pytest

from app.adapters.ledger import NotionLedgerClient, create_ledger_client
from app.core.config import settings
from app.core.errors import ConfigurationAppError, LedgerAppError


def _client(handler) -> NotionLedgerClient:
    return NotionLedgerClient(
        token="secret_abc",
        database_id="db-123",
        transport=httpx.MockTransport(handler),
    )


class TestCreatePage:
    @pytest.mark.asyncio
    async def test_posts_payload_with_notion_headers(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"object": "page", "id": "page-1"})

        payload = {"parent": {"database_id": "db-123"}, "properties": {}}
        result = await _client(handler).create_page(payload)

        assert result == {"object": "page", "id": "page-1"}
        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.notion.com/v1/pages"
        assert request.headers["Authorization"] == "Bearer secret_abc"
        assert request.headers["Notion-Version"] == "2022-06-28"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == payload

    @pytest.mark.asyncio
    async def test_uses_ten_second_timeout(self) -> None:
        timeouts: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            timeouts.append(request.extensions["timeout"])
            return httpx.Response(200, json={"id": "page-1"})

        await _client(handler).create_page({})

        assert timeouts[0]["read"] == 10.0
        assert timeouts[0]["connect"] == 10.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 404, 429, 500])
    async def test_error_status_raises_with_details(self, status: int) -> None:
        body = {"object": "error", "status": status, "code": "some_code", "message": "upstream detail"}

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json=body)

        with pytest.raises(LedgerAppError) as exc_info:
            await _client(handler).create_page({})

        exc = exc_info.value
        assert exc.code == "ledger_http_error"
        assert exc.message == "upstream detail"
        assert exc.details["http_status"] == status
        assert exc.details["context"] == body

    @pytest.mark.asyncio
    async def test_non_json_error_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="<html>Bad Gateway</html>")

        with pytest.raises(LedgerAppError) as exc_info:
            await _client(handler).create_page({})

        assert exc_info.value.details["http_status"] == 502
        assert exc_info.value.message == "Notion returned HTTP 502"

    @pytest.mark.asyncio
    async def test_timeout_is_reported(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(LedgerAppError) as exc_info:
            await _client(handler).create_page({})

        assert exc_info.value.code == "ledger_timeout"

    @pytest.mark.asyncio
    async def test_slow_response_exceeding_deadline_times_out(self) -> None:
        async def trickle():
            for byte in b'{"id": "page-1"}':
                await asyncio.sleep(0.05)
                yield bytes([byte])

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=trickle())

        client = NotionLedgerClient(
            token="secret_abc",
            database_id="db-123",
            timeout_seconds=0.2,
            transport=httpx.MockTransport(handler),
        )

        started = time.perf_counter()
        with pytest.raises(LedgerAppError) as exc_info:
            await client.create_page({})

        assert exc_info.value.code == "ledger_timeout"
        assert exc_info.value.details["timeout_seconds"] == 0.2
        assert time.perf_counter() - started < 0.6

    @pytest.mark.asyncio
    async def test_success_with_non_json_body_is_accepted(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="ok")

        result = await _client(handler).create_page({})

        assert result == {"raw": "ok"}

    @pytest.mark.asyncio
    async def test_redirect_is_treated_as_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"Location": "https://example.com/"})

        with pytest.raises(LedgerAppError) as exc_info:
            await _client(handler).create_page({})

        assert exc_info.value.code == "ledger_http_error"
        assert exc_info.value.details["http_status"] == 302

    @pytest.mark.asyncio
    async def test_connection_failure_is_reported(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(LedgerAppError) as exc_info:
            await _client(handler).create_page({})

        assert exc_info.value.code == "ledger_network_error"


class TestRetrieveDatabase:
    @pytest.mark.asyncio
    async def test_reads_configured_database(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"object": "database", "id": "db-123"})

        result = await _client(handler).retrieve_database()

        assert result["id"] == "db-123"
        assert captured[0].method == "GET"
        assert str(captured[0].url) == "https://api.notion.com/v1/databases/db-123"
        assert captured[0].extensions["timeout"]["read"] == 5.0


class TestLedgerFactory:
    def test_builds_client_from_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings.ledger, "token", "secret_xyz")
        monkeypatch.setattr(settings.ledger, "database_id", "db-999")
        monkeypatch.setattr(settings.ledger, "timeout_seconds", 7.5)

        client = create_ledger_client()

        assert isinstance(client, NotionLedgerClient)
        assert client.database_id == "db-999"
        assert client.timeout_seconds == 7.5

    @pytest.mark.parametrize("missing", ["token", "database_id"])
    def test_missing_credentials_raise(self, monkeypatch: pytest.MonkeyPatch, missing: str) -> None:
        monkeypatch.setattr(settings.ledger, missing, None)

        with pytest.raises(ConfigurationAppError) as exc_info:
            create_ledger_client()

        assert exc_info.value.code == "ledger_not_configured"
