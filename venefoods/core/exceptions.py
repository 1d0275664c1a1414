# venefoods/core/exceptions.py
"""
Storefront error taxonomy.

All errors are HTTPExceptions so services can raise them at the point
of failure and FastAPI renders `{"detail": "..."}` with the matching
status code. Callers that are not HTTP handlers (tests, scripts) can
still catch them by class.
"""

from fastapi import HTTPException, status


class StorefrontError(HTTPException):
    """Base class for all storefront errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(status_code=self.status_code, detail=self.message)


# ---- Local validation (no side effects) ----


class ValidationError(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid data"


class MissingShippingZone(ValidationError):
    default_message = "Please select a shipping zone"


class StoreClosed(StorefrontError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "The store is not accepting orders right now"


class NotFound(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


# ---- Cart / coupon ----


class StockExceeded(StorefrontError):
    """Raised when an increment would go past the product stock."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Stock limit reached"

    def __init__(
        self,
        product_id: str | None = None,
        stock: int | None = None,
        message: str | None = None,
    ):
        self.product_id = product_id
        self.stock = stock
        if message is None and stock is not None:
            message = f"Stock limit reached ({stock} available)"
        super().__init__(message)


class OutOfStock(StockExceeded):
    default_message = "Out of stock"


class InvalidCoupon(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid or inactive coupon"


# ---- External services ----


class TransactionConflict(StorefrontError):
    """Two submissions collided on the order counter."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Concurrent order submission, please retry"


class TransientServiceError(StorefrontError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Error saving the order, please try again."


class IdempotencyConflict(StorefrontError):
    """The idempotency key was already used by another cart."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "This checkout token belongs to a different cart"
