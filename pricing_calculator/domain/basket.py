"""Domain models for baskets and their priced results."""
from decimal import Decimal
from typing import Dict, Optional, Tuple
from pydantic import BaseModel, Field, field_validator


class BasketEntry(BaseModel):
    """A requested article and how many units of it.

    Entries are immutable values: two entries with the same article and
    quantity are the same entry.
    """
    article_id: Optional[str] = Field(default=None, alias="articleId")
    quantity: Optional[Decimal] = None

    class Config:
        frozen = True
        populate_by_name = True
        json_schema_extra = {
            "example": {"articleId": "article-1", "quantity": "2"}
        }


class Basket(BaseModel):
    """A customer's basket.

    Fields are optional at this level so that a malformed basket can reach
    the validator and be rejected with a business message.
    """
    customer_id: Optional[str] = Field(default=None, alias="customerId")
    entries: Optional[Tuple[BasketEntry, ...]] = None

    class Config:
        frozen = True
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "customerId": "customer-1",
                "entries": [
                    {"articleId": "article-1", "quantity": "4"},
                    {"articleId": "article-2", "quantity": "2"}
                ]
            }
        }

    @field_validator("entries")
    @classmethod
    def drop_duplicate_entries(cls, entries):
        """Keep the first occurrence of each equal entry, in insertion order."""
        if entries is None:
            return None
        return tuple(dict.fromkeys(entries))


class BasketCalculationResult(BaseModel):
    """Priced basket.

    Attributes:
        customer_id: Customer the basket was priced for, if any
        priced_basket_entries: Entry total per article id
        total_amount: Sum of all entry totals
    """
    customer_id: Optional[str] = Field(default=None, alias="customerId")
    priced_basket_entries: Dict[str, Decimal] = Field(default_factory=dict, alias="pricedBasketEntries")
    total_amount: Decimal = Field(alias="totalAmount")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "customerId": "customer-1",
                "pricedBasketEntries": {"article-1": "5.40", "article-2": "1.04"},
                "totalAmount": "6.44"
            }
        }
