"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import health_router, waitlist_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations

logger = logging.getLogger(__name__)


def parse_origins(origins: str | None) -> list[str]:
    """Parse a comma-separated origin list.

    Examples:
        >>> parse_origins("http://a.test, http://b.test ,")
        ['http://a.test', 'http://b.test']
        >>> parse_origins(None)
        []
    """
    if not origins:
        return []
    return [origin.strip() for origin in origins.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info(
        "app.startup",
        extra={
            "app_env": settings.app_env,
            "version": settings.app.version,
            "ledger_configured": settings.ledger.is_configured,
            "database_id_set": bool(settings.ledger.database_id),
            "token_set": bool(settings.ledger.token),
            "rate_limit_enabled": settings.app.rate_limit_enabled,
        },
    )
    if not settings.ledger.is_configured:
        logger.warning("app.ledger_not_configured")
    yield
    logger.info("app.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title=f"{settings.app.service_name} Waitlist API",
        description=(
            "Accepts waitlist sign-ups, validates and rate-limits them per email, "
            "and records accepted entries in a Notion database."
        ),
        version=settings.app.version,
        lifespan=lifespan,
    )

    # Middleware
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_origins(settings.app.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", settings.log.request_id_header],
        expose_headers=[settings.log.request_id_header, "Retry-After"],
    )

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(waitlist_router, prefix="/api")
    app.include_router(health_router, prefix="/api")

    apply_openapi_customizations(app)

    return app
