"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


DEFAULT_CORS_ORIGINS = ",".join(
    [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8080",
        "http://127.0.0.1:8080",
        "http://localhost:5000",
        "http://127.0.0.1:5000",
    ]
)


class LedgerSettings(BaseSettings):
    """Ledger service (Notion) configuration.

    Credentials are optional at startup: a missing token or database id is
    reported per request as a server misconfiguration, not a boot failure.
    """

    token: str | None = Field(
        None,
        description="Bearer token of the Notion integration",
    )
    database_id: str | None = Field(
        None,
        description="Identifier of the Notion database receiving waitlist pages",
    )
    api_base_url: str = Field(
        "https://api.notion.com/v1",
        description="Base URL of the Notion REST API",
    )
    api_version: str = Field(
        "2022-06-28",
        description="Value sent in the Notion-Version header",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Timeout for page creation requests in seconds",
        gt=0,
    )
    probe_timeout_seconds: float = Field(
        5.0,
        description="Timeout for the connectivity probe in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="NOTION_",
        case_sensitive=False,
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.token and self.database_id)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    service_name: str = Field(
        "Techdio",
        description="Name reported by the health endpoint",
    )
    version: str = Field(
        "1.0.0",
        description="Service version reported by the health endpoint",
    )
    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    cors_origins: str = Field(
        DEFAULT_CORS_ORIGINS,
        description="Comma-separated list of origins allowed by CORS",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-identity rate limiting of waitlist submissions",
    )
    rate_limit_window_ms: int = Field(
        15 * 60 * 1000,
        description="Length of the rate-limit window in milliseconds",
        ge=1,
    )
    rate_limit_max_submissions_per_identity: int = Field(
        3,
        description="Maximum number of submissions per identity within one window",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: 'json' or 'plain'")
    output: str = Field("stdout", description="Log output: 'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        0,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Number of rotated files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header carrying the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    app: AppSettings = Field(default_factory=AppSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
