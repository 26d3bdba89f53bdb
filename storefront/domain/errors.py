# storefront/domain/errors.py
"""
Typed failures raised by the services.

Each error carries a machine readable ``code`` and the HTTP status the router
layer answers with. ``extra`` is merged into the error payload (e.g. the
available quantity for stock failures).
"""
from typing import Any, Dict


class StorefrontError(Exception):
    code = "Internal"
    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, **self.extra}


class NotFound(StorefrontError):
    code = "NotFound"
    status_code = 404


class ValidationFailed(StorefrontError):
    code = "ValidationFailed"
    status_code = 400


class Unauthenticated(StorefrontError):
    code = "Unauthenticated"
    status_code = 401


class Unauthorized(StorefrontError):
    code = "Unauthorized"
    status_code = 403


class Conflict(StorefrontError):
    code = "Conflict"
    status_code = 409


class Internal(StorefrontError):
    code = "Internal"
    status_code = 500


class InsufficientStock(StorefrontError):
    code = "InsufficientStock"
    status_code = 400

    def __init__(self, message: str, available: int, **extra: Any):
        super().__init__(message, available=available, **extra)
        self.available = available


# checkout failures

class EmptyCart(ValidationFailed):
    code = "EmptyCart"


class UserNotFound(NotFound):
    code = "UserNotFound"


class NoPaymentMethods(ValidationFailed):
    code = "NoPaymentMethods"


class PaymentMethodNotFound(NotFound):
    code = "PaymentMethodNotFound"


class ProductUnavailable(NotFound):
    code = "ProductUnavailable"


class InsufficientInventory(InsufficientStock):
    code = "InsufficientInventory"

    def __init__(self, product: str, requested: int, available: int):
        super().__init__(
            f'Not enough inventory for "{product}"',
            available=available,
            product=product,
            requested=requested,
        )
        self.product = product
        self.requested = requested
