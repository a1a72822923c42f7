"""Notion ledger client adapter."""

import asyncio
import logging
from typing import Any

import httpx

from app.adapters.ledger.base import AbstractLedgerClient
from app.core.errors import LedgerAppError

logger = logging.getLogger(__name__)


def _response_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a response body, tolerating non-JSON answers."""
    try:
        body = response.json()
    except ValueError:
        return {"raw": response.text[:500]}
    return body if isinstance(body, dict) else {"raw": body}


class NotionLedgerClient(AbstractLedgerClient):
    """Client for the Notion pages and databases endpoints.

    Uses ``httpx.AsyncClient``; a fresh client is opened per call so no
    connection state outlives a request.
    """

    def __init__(
        self,
        token: str,
        database_id: str,
        base_url: str = "https://api.notion.com/v1",
        api_version: str = "2022-06-28",
        timeout_seconds: float = 10.0,
        probe_timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Notion client.

        Args:
            token: Integration token sent as a bearer credential.
            database_id: Target database for new pages.
            base_url: Notion REST API base URL.
            api_version: Value of the Notion-Version header.
            timeout_seconds: Timeout for page creation.
            probe_timeout_seconds: Timeout for the metadata read.
            transport: Optional httpx transport (used by tests).
        """
        self.database_id = database_id
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.probe_timeout_seconds = probe_timeout_seconds
        self._token = token
        self._api_version = api_version
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
            "Notion-Version": self._api_version,
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        timeout: float,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            # httpx timeouts apply per phase; the whole call gets one deadline.
            response = await asyncio.wait_for(
                self._send(method, path, json=json, timeout=timeout),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise LedgerAppError(
                code="ledger_timeout",
                message=f"Notion request timed out after {timeout}s",
                details={"timeout_seconds": timeout, "context": {"path": path}},
            ) from exc
        except httpx.TransportError as exc:
            raise LedgerAppError(
                code="ledger_network_error",
                message=f"Notion request failed: {exc}",
                details={"context": {"path": path, "error_type": type(exc).__name__}},
            ) from exc

        body = _response_body(response)

        # Redirects are not followed, so anything outside 2xx is a failure.
        if not response.is_success:
            raise LedgerAppError(
                code="ledger_http_error",
                message=str(body.get("message") or f"Notion returned HTTP {response.status_code}"),
                details={"http_status": response.status_code, "context": body},
            )

        logger.debug(
            "ledger.response",
            extra={"path": path, "status_code": response.status_code},
        )
        return body

    async def _send(
        self,
        method: str,
        path: str,
        *,
        timeout: float,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            transport=self._transport,
        ) as client:
            return await client.request(method, path, json=json, timeout=timeout)

    async def create_page(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request(
            "POST", "/pages", json=payload, timeout=self.timeout_seconds
        )

    async def retrieve_database(self) -> dict[str, Any]:
        return await self._request(
            "GET", f"/databases/{self.database_id}", timeout=self.probe_timeout_seconds
        )
