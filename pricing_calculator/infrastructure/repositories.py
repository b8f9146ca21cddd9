"""In-memory price and discount repositories."""
import random
import threading
from decimal import Decimal
from typing import Mapping, Optional

from pricing_calculator.core.config import DEFAULT_RANDOM_PRICE_MIN, DEFAULT_RANDOM_PRICE_SPREAD
from pricing_calculator.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CUSTOMER_DISCOUNTS = {
    "customer-1": Decimal("0.90"),
    "customer-2": Decimal("0.85"),
}


class InMemoryPriceRepository:
    """Article prices held in process memory.

    Known prices come from ``prices`` (for instance a loaded catalog). With
    ``generate_missing`` enabled, an unknown article is given a random price
    in ``[price_min, price_min + price_spread)`` the first time it is looked
    up; that price is kept, so every later lookup returns the same value.

    Example:
        >>> repo = InMemoryPriceRepository({"article-1": Decimal("1.50")})
        >>> repo.find_price_by_article_id("article-1")
        Decimal('1.50')
        >>> repo.find_price_by_article_id("article-9") is None
        True
    """

    def __init__(
        self,
        prices: Optional[Mapping[str, Decimal]] = None,
        generate_missing: bool = False,
        price_min: Decimal = DEFAULT_RANDOM_PRICE_MIN,
        price_spread: Decimal = DEFAULT_RANDOM_PRICE_SPREAD,
        rng: Optional[random.Random] = None
    ):
        self._prices = dict(prices or {})
        self.generate_missing = generate_missing
        self.price_min = price_min
        self.price_spread = price_spread
        self._rng = rng or random.Random()
        self._lock = threading.Lock()

    def find_price_by_article_id(self, article_id: str) -> Optional[Decimal]:
        price = self._prices.get(article_id)
        if price is not None or not self.generate_missing:
            return price

        with self._lock:
            if article_id not in self._prices:
                self._prices[article_id] = self._generate_price()
                logger.debug(f"Generated price for {article_id}", extra={"article_id": article_id})
            return self._prices[article_id]

    def _generate_price(self) -> Decimal:
        return self.price_min + Decimal(repr(self._rng.random())) * self.price_spread


class DiscountRepository:
    """Customer discount factors from a static table."""

    def __init__(self, discounts: Optional[Mapping[str, Decimal]] = None):
        self._discounts = dict(DEFAULT_CUSTOMER_DISCOUNTS if discounts is None else discounts)

    def find_discount_by_customer_id(self, customer_id: str) -> Optional[Decimal]:
        return self._discounts.get(customer_id)
