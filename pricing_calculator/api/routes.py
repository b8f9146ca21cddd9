"""FastAPI routes for basket and article pricing.

Pricing errors propagate out of the handlers; ``main`` maps them to
status codes. Monetary values are written as exact JSON numbers.
"""
from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, Query

from pricing_calculator.api.dependencies import get_basket_calculator, get_basket_validator
from pricing_calculator.api.responses import DecimalJSONResponse
from pricing_calculator.core.errors import ErrorResponse
from pricing_calculator.domain.basket import Basket, BasketCalculationResult
from pricing_calculator.services.pricing import BasketCalculatorService
from pricing_calculator.services.validator import BasketValidator

router = APIRouter(default_response_class=DecimalJSONResponse)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid basket"},
    404: {"model": ErrorResponse, "description": "Article has no price"},
    500: {"model": ErrorResponse, "description": "Unexpected error"},
}


@router.post("/baskets", response_model=BasketCalculationResult, responses=ERROR_RESPONSES)
def calculate_basket(
    basket: Basket,
    validator: BasketValidator = Depends(get_basket_validator),
    service: BasketCalculatorService = Depends(get_basket_calculator),
):
    """Price a basket for an optional customer.

    Example:
        POST /baskets
        {"customerId": "customer-1", "entries": [{"articleId": "article-1", "quantity": 2}]}
    """
    validator.validate(basket)
    result = service.calculate_basket(basket)
    return DecimalJSONResponse(content=result.model_dump(by_alias=True))


@router.get("/articles/{article_id}/price", response_model=Decimal, responses=ERROR_RESPONSES)
def get_article_price(
    article_id: str,
    customer_id: Optional[str] = Query(default=None, alias="customerId"),
    service: BasketCalculatorService = Depends(get_basket_calculator),
):
    """Return the unit price of an article, discounted for ``customerId`` if given."""
    price = service.get_article_price_for_customer(article_id, customer_id)
    return DecimalJSONResponse(content=price)
