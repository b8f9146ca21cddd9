"""Loading of price and discount tables from CSV files.

Values are read as text and converted to Decimal so that no price ever
passes through a binary float.
"""
import pandas as pd
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Dict

ARTICLE_COL = "article_id"
PRICE_COL = "price"
CUSTOMER_COL = "customer_id"
DISCOUNT_COL = "discount"


def _load_decimal_table(path: str, key_col: str, value_col: str) -> Dict[str, Decimal]:
    """Read a two-column CSV into a key -> Decimal mapping.

    Keys are stripped; rows with an empty key or value are skipped. When a key
    appears several times the last row wins.

    Raises:
        ValueError: If a column is missing or a value is not a decimal number
    """
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = [col for col in (key_col, value_col) if col not in df.columns]
    if missing:
        raise ValueError(f"{path} is missing column(s): {', '.join(missing)}")

    table: Dict[str, Decimal] = {}
    for key, raw_value in zip(df[key_col].str.strip(), df[value_col].str.strip()):
        if not key or not raw_value:
            continue
        try:
            value = Decimal(raw_value)
        except InvalidOperation:
            value = None
        if value is None or not value.is_finite():
            raise ValueError(f"{path}: '{raw_value}' for '{key}' is not a decimal number")
        table[key] = value
    return table


@lru_cache(maxsize=8)
def load_price_catalog(path: str) -> Dict[str, Decimal]:
    """Load article prices from a CSV with ``article_id`` and ``price`` columns.

    Raises:
        ValueError: If a column is missing or a price is malformed or negative

    Example:
        >>> load_price_catalog("data/prices.csv")
        {'article-1': Decimal('1.50'), 'article-2': Decimal('0.58')}
    """
    prices = _load_decimal_table(path, ARTICLE_COL, PRICE_COL)
    negative = [article for article, price in prices.items() if price < 0]
    if negative:
        raise ValueError(f"{path}: negative price for {', '.join(negative)}")
    return prices


@lru_cache(maxsize=8)
def load_discount_table(path: str) -> Dict[str, Decimal]:
    """Load customer discount factors from a CSV with ``customer_id`` and ``discount`` columns.

    Raises:
        ValueError: If a column is missing or a factor is outside (0, 1]
    """
    discounts = _load_decimal_table(path, CUSTOMER_COL, DISCOUNT_COL)
    invalid = [customer for customer, factor in discounts.items() if not Decimal(0) < factor <= Decimal(1)]
    if invalid:
        raise ValueError(f"{path}: discount factor outside (0, 1] for {', '.join(invalid)}")
    return discounts
