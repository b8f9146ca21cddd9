"""Core application configuration and settings.

Handles environment variables, lookup table sources and pricing limits.
"""
from decimal import Decimal
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings


# Load environment variables
ROOT = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=ROOT / ".env", override=False)

PRICE_CACHE_BACKENDS = ("memory", "redis")

# Pricing defaults
DEFAULT_MAX_ARTICLE_QUANTITY = Decimal("10")
DEFAULT_PRICE_SCALE = 2
MAX_PRICE_SCALE = 10
DEFAULT_RANDOM_PRICE_MIN = Decimal("0.50")
DEFAULT_RANDOM_PRICE_SPREAD = Decimal("29.50")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Pricing rules
    max_article_quantity: Decimal = Field(default=DEFAULT_MAX_ARTICLE_QUANTITY, alias="MAX_ARTICLE_QUANTITY")
    price_scale: int = Field(default=DEFAULT_PRICE_SCALE, alias="PRICE_SCALE")

    # Lookup tables
    price_catalog_path: Optional[str] = Field(default=None, alias="PRICE_CATALOG_PATH")
    discount_table_path: Optional[str] = Field(default=None, alias="DISCOUNT_TABLE_PATH")
    generate_missing_prices: bool = Field(default=True, alias="GENERATE_MISSING_PRICES")
    random_price_min: Decimal = Field(default=DEFAULT_RANDOM_PRICE_MIN, alias="RANDOM_PRICE_MIN")
    random_price_spread: Decimal = Field(default=DEFAULT_RANDOM_PRICE_SPREAD, alias="RANDOM_PRICE_SPREAD")

    # Redis Configuration
    price_cache_backend: str = Field(default="memory", alias="PRICE_CACHE_BACKEND")
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_password: Optional[str] = Field(default=None, alias="REDIS_PASSWORD")
    redis_db: int = Field(default=0, alias="REDIS_DB")

    # Application Settings
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # API Settings
    cors_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000"
        ],
        alias="CORS_ORIGINS"
    )

    class Config:
        case_sensitive = False
        env_file = ".env"
        populate_by_name = True
        extra = "ignore"

    def validate_required_settings(self):
        """Validate that the pricing settings are usable."""
        if self.max_article_quantity <= 0:
            raise ValueError(
                "MAX_ARTICLE_QUANTITY must be greater than zero."
            )
        if not 0 <= self.price_scale <= MAX_PRICE_SCALE:
            raise ValueError(
                f"PRICE_SCALE must be between 0 and {MAX_PRICE_SCALE}."
            )
        if self.random_price_min < 0 or self.random_price_spread < 0:
            raise ValueError(
                "RANDOM_PRICE_MIN and RANDOM_PRICE_SPREAD must not be negative."
            )
        if self.price_cache_backend not in PRICE_CACHE_BACKENDS:
            raise ValueError(
                f"PRICE_CACHE_BACKEND must be one of {', '.join(PRICE_CACHE_BACKENDS)}, "
                f"got '{self.price_cache_backend}'."
            )
        if self.environment == "production" and self.debug:
            raise ValueError(
                "DEBUG must be disabled in production."
            )


# Global settings instance
settings = Settings()


# Validate settings on module import (only in non-test environments)
if settings.environment != "test":
    try:
        settings.validate_required_settings()
    except ValueError as e:
        print(f"Configuration Error: {e}")
        # Don't raise in development to allow partial setup
        if settings.environment == "production":
            raise
