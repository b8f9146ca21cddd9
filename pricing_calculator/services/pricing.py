"""Basket pricing.

Resolves unit prices, applies customer discount factors and aggregates a
basket into per-article totals and a grand total.

Rounding rules:
- a discounted unit price is rounded half-up to ``price_scale`` places
- undiscounted unit prices, entry totals and the grand total are never rounded
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

from pricing_calculator.core.config import DEFAULT_MAX_ARTICLE_QUANTITY, DEFAULT_PRICE_SCALE
from pricing_calculator.core.errors import ArticleNotFoundError, QuantityExceededError
from pricing_calculator.core.logging import LogTimer, get_logger
from pricing_calculator.domain.basket import Basket, BasketCalculationResult, BasketEntry
from pricing_calculator.domain.sources import DiscountSource, PriceSource

logger = get_logger(__name__)


class BasketCalculatorService:
    """Prices articles and baskets for customers.

    Holds no per-request state; one instance can be shared across threads.

    Example:
        >>> service = BasketCalculatorService(price_repository, discount_repository)
        >>> service.get_article_price_for_customer("article-1", "customer-1")
        Decimal('30.86')
    """

    def __init__(
        self,
        price_source: PriceSource,
        discount_source: DiscountSource,
        max_article_quantity: Decimal = DEFAULT_MAX_ARTICLE_QUANTITY,
        price_scale: int = DEFAULT_PRICE_SCALE
    ):
        self.price_source = price_source
        self.discount_source = discount_source
        self.max_article_quantity = max_article_quantity
        self.quantum = Decimal(1).scaleb(-price_scale)

    def calculate_basket(self, basket: Basket) -> BasketCalculationResult:
        """Price every entry of a basket and sum the entry totals.

        Entries sharing an article id are priced independently; the later
        entry's total replaces the earlier one in the result.

        Args:
            basket: A basket that already passed validation

        Returns:
            Entry total per article id and the basket total

        Raises:
            QuantityExceededError: If an entry asks for too many units
            ArticleNotFoundError: If an article has no price
        """
        with LogTimer(logger, "calculate_basket"):
            priced_articles = self._get_priced_articles(basket)
            total_amount = sum(priced_articles.values(), Decimal(0))
            logger.debug(f"Total amount is: {total_amount}", extra={"customer_id": basket.customer_id})

        return BasketCalculationResult(
            customer_id=basket.customer_id,
            priced_basket_entries=priced_articles,
            total_amount=total_amount
        )

    def get_article_price_for_customer(self, article_id: str, customer_id: Optional[str] = None) -> Decimal:
        """Unit price of an article as seen by a customer.

        Without a customer, or for a customer without a discount, this is the
        full price as stored. Otherwise it is the discounted price rounded
        half-up.

        Raises:
            ArticleNotFoundError: If the article has no price
        """
        if customer_id is None:
            return self._get_full_price(article_id)

        return self._get_price_with_discount_for_customer(article_id, customer_id)

    def _get_price_with_discount_for_customer(self, article_id: str, customer_id: str) -> Decimal:
        full_price = self._get_full_price(article_id)

        discount = self.discount_source.find_discount_by_customer_id(customer_id)
        if discount is None:
            return full_price

        return self._round(full_price * discount)

    def _get_full_price(self, article_id: str) -> Decimal:
        full_price = self.price_source.find_price_by_article_id(article_id)
        if full_price is None:
            raise ArticleNotFoundError(f"Could not find price for article {article_id}")
        return full_price

    def _round(self, value: Decimal) -> Decimal:
        return value.quantize(self.quantum, rounding=ROUND_HALF_UP)

    def _get_priced_articles(self, basket: Basket) -> Dict[str, Decimal]:
        priced_articles: Dict[str, Decimal] = {}
        for entry in basket.entries:
            priced_articles[entry.article_id] = self._calculate_article_total_price(entry, basket.customer_id)
        return priced_articles

    def _calculate_article_total_price(self, entry: BasketEntry, customer_id: Optional[str]) -> Decimal:
        quantity = entry.quantity
        if quantity > self.max_article_quantity:
            raise QuantityExceededError(f"Quantity {quantity} exceeds the available amount")

        price_per_item = self.get_article_price_for_customer(entry.article_id, customer_id)
        return quantity * price_per_item
