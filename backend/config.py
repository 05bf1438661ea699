"""
Configuration management for the Restaurant Payments API.

Loads settings from .env via pydantic-settings.

Notes:
    - duplicate_payment_policy decides whether an order may receive more than
      one completed payment ("allow" keeps split payments possible)
    - expose_error_details passes internal error text through to API callers;
      acceptable for the back-office tool, warned about in production
"""
import logging
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Database ────────────────────────────────────────────────────
    database_url: str = "sqlite:///./data/restaurant.db"
    sql_echo: bool = False

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"
    log_level: str = "INFO"

    # ── Payments ────────────────────────────────────────────────────
    duplicate_payment_policy: Literal["allow", "reject"] = "allow"
    default_page_limit: int = 50
    max_page_limit: int = 200
    recent_payments_limit: int = 5
    expose_error_details: bool = True

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
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def async_database_url(self) -> str:
        """Convert sqlite:///... → sqlite+aiosqlite:///... for the async driver."""
        if self.database_url.startswith("sqlite:///"):
            return self.database_url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return self.database_url

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
            if self.max_page_limit < self.default_page_limit:
                raise ValueError("MAX_PAGE_LIMIT must be >= DEFAULT_PAGE_LIMIT")
            if self.expose_error_details:
                logger.warning(
                    "⚠️  EXPOSE_ERROR_DETAILS=true in production "
                    "(internal error text is returned to API callers)"
                )
            logger.info("✅ Production settings validated")
        else:
            warnings = []
            if "*" in self.cors_origins:
                warnings.append("CORS_ORIGINS contains '*' (open access)")
            if self.duplicate_payment_policy == "allow":
                warnings.append("DUPLICATE_PAYMENT_POLICY=allow (orders may receive several completed payments)")
            for w in warnings:
                logger.warning(f"⚠️  {w}")


# Global settings instance
settings = Settings()
