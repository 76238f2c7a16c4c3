"""
Error taxonomy shared by the product and order services.

Services raise these; routers translate them into HTTP status codes.
"""


class StorefrontError(Exception):
    """Base class for every domain error raised by the services."""


class NotFoundError(StorefrontError):
    """A product, order or product image does not exist."""


class ValidationFailure(StorefrontError, ValueError):
    """The request is well-formed JSON but cannot be honoured as given."""


class InsufficientStockError(ValidationFailure):
    def __init__(self, product_name: str, available: int, requested: int):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name}: "
            f"{available} available, {requested} requested"
        )


class StoreError(StorefrontError):
    """The persistence layer rejected the operation (e.g. a blocked delete)."""
