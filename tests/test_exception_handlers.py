"""Tests for global exception handlers.

Validates that errors escaping routes are converted to the
``{"success": false, "message": ...}`` envelope with proper status codes and
no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import (
    AppError,
    ConfigurationAppError,
    LedgerAppError,
    RateLimitAppError,
    ValidationAppError,
)
from app.core.exception_handlers import general_exception_handler, setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    """Create test client with handlers enabled."""
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_validation_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation")
        async def endpoint():
            raise ValidationAppError(code="invalid_email", message="Please enter a valid email address")

        response = client.get("/test-validation")

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Please enter a valid email address",
        }

    def test_rate_limit_error_returns_429(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-rate-limit")
        async def endpoint():
            raise RateLimitAppError(code="rate_limited", message="Too many submissions.")

        response = client.get("/test-rate-limit")

        assert response.status_code == 429
        assert response.json()["success"] is False

    @pytest.mark.parametrize("error_cls", [ConfigurationAppError, LedgerAppError])
    def test_server_errors_return_generic_500(
        self, client: TestClient, app_with_handlers: FastAPI, error_cls
    ):
        @app_with_handlers.get("/test-server")
        async def endpoint():
            raise error_cls(
                code="ledger_http_error",
                message="API token is invalid.",
                details={"http_status": 401},
            )

        response = client.get("/test-server")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal server error"}
        assert "token" not in response.text


class TestFrameworkErrors:
    def test_unknown_route_returns_envelope(self, client: TestClient):
        response = client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Endpoint not found"}

    def test_wrong_method_returns_envelope(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.post("/only-post")
        async def endpoint():
            return {"ok": True}

        response = client.get("/only-post")

        assert response.status_code == 405
        assert response.json() == {"success": False, "message": "Method Not Allowed"}


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_handler_registered(self, app_with_handlers: FastAPI):
        assert Exception in app_with_handlers.exception_handlers

    def test_unexpected_error_in_route_returns_500(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/boom")
        async def endpoint():
            raise RuntimeError("database password is hunter2")

        response = client.get("/boom")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal server error"}
        assert "hunter2" not in response.text

    def test_general_exception_handler_never_leaks_stack_trace(self):
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = ValueError("Test error with details")
        response = asyncio.run(general_exception_handler(request, exc))

        response_text = bytes(response.body).decode()
        data = json.loads(response_text)
        assert response.status_code == 500
        assert data == {"success": False, "message": "Internal server error"}
        assert "Traceback" not in response_text
        assert "ValueError" not in response_text


class TestErrorHandlerIntegration:
    def test_setup_exception_handlers_registers_handlers(self, app_with_handlers: FastAPI):
        assert AppError in app_with_handlers.exception_handlers
        assert Exception in app_with_handlers.exception_handlers

    def test_multiple_handler_setups_does_not_fail(self):
        app = FastAPI()

        setup_exception_handlers(app)
        setup_exception_handlers(app)

        assert AppError in app.exception_handlers
