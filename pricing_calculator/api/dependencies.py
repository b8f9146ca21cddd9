"""Wiring of pricing services for the API.

Each provider is cached so that all requests share one set of lookup
tables. Tests replace providers through ``app.dependency_overrides``.
"""
from functools import lru_cache

from pricing_calculator.core.config import settings
from pricing_calculator.core.logging import get_logger
from pricing_calculator.domain.sources import DiscountSource, PriceSource
from pricing_calculator.infrastructure.catalog import load_discount_table, load_price_catalog
from pricing_calculator.infrastructure.redis import RedisPriceRepository, get_redis_client
from pricing_calculator.infrastructure.repositories import DiscountRepository, InMemoryPriceRepository
from pricing_calculator.services.pricing import BasketCalculatorService
from pricing_calculator.services.validator import BasketValidator

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_price_source() -> PriceSource:
    """Build the configured price source.

    Prices come from PRICE_CATALOG_PATH when set; unknown articles get a
    generated price when GENERATE_MISSING_PRICES is on. With
    PRICE_CACHE_BACKEND=redis, answers are shared through Redis, falling back
    to process memory when Redis is unreachable.
    """
    prices = load_price_catalog(settings.price_catalog_path) if settings.price_catalog_path else {}
    source: PriceSource = InMemoryPriceRepository(
        prices,
        generate_missing=settings.generate_missing_prices,
        price_min=settings.random_price_min,
        price_spread=settings.random_price_spread,
    )
    logger.info(
        f"Price source ready: {len(prices)} catalog price(s), "
        f"generate_missing={settings.generate_missing_prices}"
    )

    if settings.price_cache_backend == "redis":
        client = get_redis_client()
        if client is not None:
            return RedisPriceRepository(source, client)
        logger.warning("Redis unavailable, keeping prices in process memory")

    return source


@lru_cache(maxsize=1)
def get_discount_source() -> DiscountSource:
    """Build the discount source from DISCOUNT_TABLE_PATH or the built-in table."""
    if settings.discount_table_path:
        return DiscountRepository(load_discount_table(settings.discount_table_path))
    return DiscountRepository()


@lru_cache(maxsize=1)
def get_basket_calculator() -> BasketCalculatorService:
    return BasketCalculatorService(
        get_price_source(),
        get_discount_source(),
        max_article_quantity=settings.max_article_quantity,
        price_scale=settings.price_scale,
    )


@lru_cache(maxsize=1)
def get_basket_validator() -> BasketValidator:
    return BasketValidator()
