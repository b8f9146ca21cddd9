"""Lookup capabilities consumed by the pricing core.

Implementations live in the infrastructure layer; the core only reads them.
"""
from decimal import Decimal
from typing import Optional, Protocol


class PriceSource(Protocol):
    def find_price_by_article_id(self, article_id: str) -> Optional[Decimal]:
        """Return the unit price of an article, or None when it is unknown."""
        ...


class DiscountSource(Protocol):
    def find_discount_by_customer_id(self, customer_id: str) -> Optional[Decimal]:
        """Return the customer's discount factor, or None when they have none."""
        ...
