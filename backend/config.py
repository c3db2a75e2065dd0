"""
Configuration management for the Candle Shop backend.

Loads settings from .env via pydantic-settings.

Notes:
    - validate_production_settings() enforces strict CORS and a JWT secret in production
    - ADMIN_AUTH_ENABLED=false reopens the admin endpoints (internal admin panel only)
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Database ────────────────────────────────────────────────────
    database_url: str = "sqlite:///./data/candle_shop.db"

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"

    # ── Auth (JWT) ──────────────────────────────────────────────────
    jwt_secret: str = ""
    jwt_issuer: str = "candle-shop-api"
    jwt_access_ttl_minutes: int = 7 * 24 * 60  # 7 days
    admin_auth_enabled: bool = True

    # ── Notifications (SMTP) ────────────────────────────────────────
    # With no SMTP host, emails are written to the log instead of sent.
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    smtp_timeout_seconds: float = 10.0
    email_from: str = "orders@candleshop.local"
    admin_email: str = ""

    # ── Orders ──────────────────────────────────────────────────────
    default_payment_method: str = "pay-on-delivery"
    orders_rate_limit_per_minute: int = 30

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
    def smtp_enabled(self) -> bool:
        return bool(self.smtp_host)

    def validate_production_settings(self):
        """
        Validate settings for production safety.

        Called during app startup.
        """
        if self.environment == "production":
            if "*" in self.cors_origins:
                raise ValueError(
                    "CORS_ORIGINS must not contain '*' in production. "
                    "Set explicit allowed origins."
                )
            if not self.jwt_secret:
                raise ValueError(
                    "JWT_SECRET must be set in production. "
                    "It is used to sign and verify customer access tokens."
                )
            if not self.admin_auth_enabled:
                raise ValueError(
                    "ADMIN_AUTH_ENABLED must be true in production. "
                    "Admin endpoints change order status and catalog data."
                )
            logger.info("Production settings validated")
        else:
            warnings = []
            if not self.admin_auth_enabled:
                warnings.append("ADMIN_AUTH_ENABLED=false (admin endpoints are open)")
            if not self.smtp_enabled:
                warnings.append("SMTP_HOST not set (order emails are only logged)")
            if not self.admin_email:
                warnings.append("ADMIN_EMAIL not set (admin order alerts are skipped)")
            if "*" in self.cors_origins:
                warnings.append("CORS_ORIGINS contains '*' (open access)")
            for w in warnings:
                logger.warning(w)


# Global settings instance
settings = Settings()
