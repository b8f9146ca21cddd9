"""Pricing error taxonomy and the error body returned to clients."""
from pydantic import BaseModel

DEFAULT_ERROR_CODE = "100"
GENERIC_ERROR_MESSAGE = "Something went wrong, please try again!"


class PricingError(Exception):
    """Base class for failures raised by the pricing core.

    The message is safe to show to clients verbatim.
    """

    code = DEFAULT_ERROR_CODE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BasketValidationError(PricingError):
    """The basket or one of its entries is malformed."""


class QuantityExceededError(BasketValidationError):
    """An entry asks for more units than may be sold at once."""


class ArticleNotFoundError(PricingError):
    """No price is known for the requested article."""


class ErrorResponse(BaseModel):
    """Error body returned by the HTTP layer.

    Attributes:
        message: Human readable failure description
        code: Application error code
    """
    message: str
    code: str = DEFAULT_ERROR_CODE

    class Config:
        json_schema_extra = {
            "example": {
                "message": "Quantity should be greater than zero",
                "code": DEFAULT_ERROR_CODE
            }
        }
