"""Redis client and Redis-shared price memoization.

When several worker processes serve the API, each one would otherwise
generate its own random price for an unknown article. Storing the first
answer in Redis makes every worker return the same price.

Configure with PRICE_CACHE_BACKEND=redis and REDIS_HOST/REDIS_PORT/
REDIS_PASSWORD/REDIS_DB.
"""
import redis
from decimal import Decimal, InvalidOperation
from typing import Optional

from pricing_calculator.core.logging import get_logger
from pricing_calculator.core.config import settings
from pricing_calculator.domain.sources import PriceSource

logger = get_logger(__name__)

# Redis connection pool (lazy initialization)
_redis_pool: Optional[redis.ConnectionPool] = None
_redis_client: Optional[redis.Redis] = None


def get_redis_client(
    host: Optional[str] = None,
    port: Optional[int] = None,
    db: Optional[int] = None,
    password: Optional[str] = None
) -> Optional[redis.Redis]:
    """Get or create Redis client with connection pooling.

    Uses settings from environment variables if not explicitly provided.
    Returns None if Redis is not available (graceful fallback).

    Args:
        host: Redis host (default from REDIS_HOST env)
        port: Redis port (default from REDIS_PORT env)
        db: Redis database number (default from REDIS_DB env)
        password: Redis password (default from REDIS_PASSWORD env)

    Returns:
        Redis client instance or None if unavailable
    """
    global _redis_pool, _redis_client

    host = host or settings.redis_host
    port = port or settings.redis_port
    db = db if db is not None else settings.redis_db
    password = password or settings.redis_password

    if _redis_client is None:
        logger.info(f"Initializing Redis connection pool: {host}:{port}")

        try:
            _redis_pool = redis.ConnectionPool(
                host=host,
                port=port,
                db=db,
                password=password,
                decode_responses=True,
                max_connections=50,
                socket_connect_timeout=5,
                socket_timeout=5,
            )

            _redis_client = redis.Redis(connection_pool=_redis_pool)

            # Test connection
            _redis_client.ping()
            logger.info("Redis connection established successfully")

        except redis.RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}", exc_info=True)
            _redis_client = None
            return None

    return _redis_client


class RedisPriceRepository:
    """Price source that shares another source's answers through Redis.

    The first price stored for an article wins (``SET NX``); later lookups,
    from any process, read it back. A missing article is never cached.
    If Redis fails, the wrapped source's answer is returned as is.

    Example:
        >>> repo = RedisPriceRepository(InMemoryPriceRepository(generate_missing=True), client)
        >>> repo.find_price_by_article_id("article-1")
        Decimal('17.2304918216')
    """

    def __init__(
        self,
        source: PriceSource,
        redis_client: redis.Redis,
        key_prefix: str = "price:"
    ):
        self.source = source
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, article_id: str) -> str:
        """Create full Redis key with prefix."""
        return f"{self.key_prefix}{article_id}"

    def find_price_by_article_id(self, article_id: str) -> Optional[Decimal]:
        key = self._make_key(article_id)

        try:
            cached = self._read(key)
            if cached is not None:
                logger.debug(f"Price cache hit: {article_id}", extra={"article_id": article_id})
                return cached
        except redis.RedisError as e:
            logger.error(f"Error reading price for {article_id}: {e}", exc_info=True)
            return self.source.find_price_by_article_id(article_id)

        price = self.source.find_price_by_article_id(article_id)
        if price is None:
            return None

        try:
            if self.redis.set(key, str(price), nx=True):
                return price
            # Another worker stored a price first
            stored = self._read(key)
            return stored if stored is not None else price
        except redis.RedisError as e:
            logger.error(f"Error saving price for {article_id}: {e}", exc_info=True)
            return price

    def _read(self, key: str) -> Optional[Decimal]:
        data = self.redis.get(key)
        if data is None:
            return None
        try:
            return Decimal(data)
        except InvalidOperation:
            logger.warning(f"Discarding malformed cached price under {key}: {data!r}")
            self.redis.delete(key)
            return None
