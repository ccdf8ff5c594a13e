from decimal import Decimal
from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "test", "development", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Identity service (owns login and session issuance)
    # Placeholder defaults keep local/test runs working; deployments override via env.
    IDENTITY_SERVICE_URL: str = "http://identity-service:8000"
    IDENTITY_SERVICE_API_KEY: str = "test-identity-api-key"
    SESSION_COOKIE_NAME: str = "storefront_session_token"
    SESSION_JWT_SECRET: str = "test-session-secret"

    # Razorpay
    RAZORPAY_BASE_URL: str = "https://api.razorpay.com/v1"
    RAZORPAY_KEY_ID: str = "rzp_test_key"
    RAZORPAY_KEY_SECRET: str = "rzp_test_secret"

    # Store pricing
    STORE_CURRENCY: str = "INR"
    FREE_SHIPPING_THRESHOLD: Decimal = Decimal("2000")
    FLAT_SHIPPING_FEE: Decimal = Decimal("199")
    FEATURED_PRODUCTS_LIMIT: int = 6

    # Buy-now creates completed orders without any gateway step.
    BUY_NOW_ENABLED: bool = True

    # Background reconciliation
    REDIS_URL: str = "redis://localhost:6379/0"
    PENDING_PAYMENT_RECONCILE_AFTER_MINUTES: int = 15

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: Optional[str] = None  # falls back to REDIS_URL
    PAYMENT_RATE_LIMIT: str = "10/minute"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
