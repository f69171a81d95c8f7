"""
Configuration management for the Storefront API.

Loads settings from .env via pydantic-settings.

Security notes:
    - validate_production_settings() enforces strict CORS and a JWT secret
    - debug_errors exposes raw store error text in responses; never in production
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Database ────────────────────────────────────────────────────
    database_url: str = "sqlite:///./data/storefront.db"
    db_pool_size: int = 10
    db_max_overflow: int = 0
    db_pool_timeout_seconds: float = 30.0
    db_connect_timeout_seconds: float = 60.0

    # ── Orders ──────────────────────────────────────────────────────
    # "client": store item prices/total as submitted
    # "catalog": re-derive item prices from the products table
    order_price_source: str = "client"
    order_verify_buyer: bool = False

    # ── Blob Storage (product images) ───────────────────────────────
    blob_account_url: str = ""          # e.g. https://<account>.blob.core.windows.net
    blob_container: str = "product-images"
    blob_sas_token: str = ""
    max_upload_bytes: int = 5 * 1024 * 1024

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"
    debug_errors: bool = False  # include store error detail in error responses

    # ── Auth (JWT) ──────────────────────────────────────────────────
    jwt_secret: str = ""
    jwt_issuer: str = "storefront-api"
    jwt_access_ttl_minutes: int = 24 * 60

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # allow unknown .env keys without crashing
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def async_database_url(self) -> str:
        """Convert sqlite:///... to sqlite+aiosqlite:///... for the async driver."""
        if self.database_url.startswith("sqlite:///"):
            return self.database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return self.database_url

    def validate_production_settings(self):
        """
        Validate settings for production safety.

        Called during app startup.
        """
        if self.order_price_source not in ("client", "catalog"):
            raise ValueError(
                f"ORDER_PRICE_SOURCE must be 'client' or 'catalog', got {self.order_price_source!r}"
            )

        if self.environment == "production":
            if "*" in self.cors_origins:
                raise ValueError(
                    "CORS_ORIGINS must not contain '*' in production. "
                    "Set explicit allowed origins."
                )
            if not self.jwt_secret:
                raise ValueError(
                    "JWT_SECRET must be set in production. "
                    "It is used to sign access tokens for user authentication."
                )
            if self.debug_errors:
                raise ValueError(
                    "DEBUG_ERRORS must be false in production. "
                    "It leaks database error text to clients."
                )
            logger.info("Production settings validated")


settings = Settings()
