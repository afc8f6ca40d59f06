# backend/wealthtrack/config.py
"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- ENVIRONMENT: Runtime mode (development, test, production)
- DATABASE_URL: Connection string for the asset store (optional)
- *_PRICE_API: Base URLs of the upstream quote providers
- PRICE_CACHE_TTL / CHART_CACHE_TTL: Cache lifetimes in seconds
- REDIS_URL: Shared cache; when unset the in-process cache is used

Configuration is validated on first use. Invalid configuration raises a
ValueError with a descriptive message.

Usage:
    from wealthtrack.config import settings

    if settings.uses_shared_cache:
        ...
"""
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Find the .env file in project root (parent of backend/)
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")
        - DEFAULT_CURRENCY: Currency used when a request names none (default: "IDR")

    Upstream providers:
        - CRYPTO_PRICE_API: CoinGecko-compatible base URL
        - CRYPTO_PRICE_API_KEY: Optional CoinGecko demo key
        - STOCK_PRICE_API: Yahoo Finance chart API base URL

    Caching:
        - PRICE_CACHE_TTL: Spot price/FX cache lifetime in seconds (default: 60)
        - CHART_CACHE_TTL: Chart/OHLCV cache lifetime in seconds (default: 900)
        - MAX_CHART_POINTS: Upper bound on chart points returned (default: 200)
        - REDIS_URL: Shared cache URL (default: unset → in-process cache)

    Resources:
        - HTTP_TIMEOUT / HTTP_CONNECT_TIMEOUT: Per-request bounds in seconds
        - VALUATION_MAX_WORKERS: Concurrent per-asset valuations
        - PORTFOLIO_TIMEOUT: Deadline for a whole portfolio fan-out
    """

    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format"
    )

    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL of the asset store"
    )

    default_currency: str = Field(
        default="IDR",
        min_length=3,
        max_length=3,
        description="ISO 4217 code used when a request names no currency"
    )

    # =========================================================================
    # UPSTREAM PROVIDERS
    # =========================================================================
    crypto_price_api: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko-compatible API base URL"
    )
    crypto_price_api_key: str | None = Field(
        default=None,
        description="Optional CoinGecko demo API key"
    )
    stock_price_api: str = Field(
        default="https://query1.finance.yahoo.com",
        description="Yahoo Finance chart API base URL"
    )

    # =========================================================================
    # CACHING
    # =========================================================================
    price_cache_ttl: int = Field(
        default=60,
        description="Spot price and FX cache lifetime in seconds (<=0 means 60)"
    )
    chart_cache_ttl: int = Field(
        default=900,
        ge=1,
        description="Chart, OHLCV and historical price cache lifetime in seconds"
    )
    max_chart_points: int = Field(
        default=200,
        ge=2,
        le=5000,
        description="Maximum number of points returned for a chart"
    )
    redis_url: str | None = Field(
        default=None,
        description="Shared cache URL (redis://...); in-process cache when unset"
    )

    # =========================================================================
    # RESOURCES
    # =========================================================================
    http_timeout: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="Total per-request timeout in seconds"
    )
    http_connect_timeout: float = Field(
        default=10.0,
        gt=0,
        le=60,
        description="Connect timeout in seconds"
    )
    valuation_max_workers: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Maximum concurrent per-asset valuations"
    )
    portfolio_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Deadline in seconds for valuing a whole portfolio"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("default_currency")
    @classmethod
    def normalize_currency(cls, value: str) -> str:
        """Currency codes are matched case-insensitively; store uppercase."""
        return value.strip().upper()

    @field_validator("crypto_price_api", "stock_price_api")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def validate_timeouts(self) -> "Settings":
        """
        Validate resource settings against each other.

        Rules:
        - connect timeout cannot exceed the total request timeout
        """
        if self.http_connect_timeout > self.http_timeout:
            raise ValueError(
                f"HTTP_CONNECT_TIMEOUT ({self.http_connect_timeout}s) cannot exceed "
                f"HTTP_TIMEOUT ({self.http_timeout}s)"
            )
        return self

    @property
    def effective_price_cache_ttl(self) -> int:
        """Price TTL with non-positive values replaced by the 60s default."""
        return self.price_cache_ttl if self.price_cache_ttl > 0 else 60

    @property
    def uses_shared_cache(self) -> bool:
        """Check if a shared (Redis) cache is configured."""
        return bool(self.redis_url)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


# Create single instance
settings = Settings()
