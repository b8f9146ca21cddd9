"""Basket well-formedness checks run before pricing."""
from pricing_calculator.core.errors import BasketValidationError
from pricing_calculator.domain.basket import Basket

EMPTY_BASKET_MESSAGE = "Basket should not be empty."
INVALID_QUANTITY_MESSAGE = "Quantity should be greater than zero"
INVALID_ARTICLE_MESSAGE = "Invalid article"


class BasketValidator:
    """Rejects malformed baskets with the first problem found."""

    def validate(self, basket: Basket) -> None:
        """Validate a basket, fail-fast.

        Args:
            basket: Basket to check

        Raises:
            BasketValidationError: If entries are missing, or an entry has no
                positive quantity or no article id
        """
        if basket.entries is None:
            raise BasketValidationError(EMPTY_BASKET_MESSAGE)

        for entry in basket.entries:
            if entry.quantity is None or entry.quantity <= 0:
                raise BasketValidationError(INVALID_QUANTITY_MESSAGE)

            if entry.article_id is None:
                raise BasketValidationError(INVALID_ARTICLE_MESSAGE)
