# marketplace/domain/errors.py


class MarketplaceError(Exception):
    """Base class for errors surfaced to the HTTP layer."""


class NotFoundError(MarketplaceError, LookupError):
    def __init__(self, resource: str, message: str | None = None):
        self.resource = resource
        super().__init__(message or f"{resource.capitalize()} not found")


class InvalidInputError(MarketplaceError, ValueError):
    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"Field '{field}' is required")


class InvalidStateError(MarketplaceError, ValueError):
    pass


class InsufficientStockError(InvalidStateError):
    def __init__(self, product_id: int, product_name: str, requested: int, available: int):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for: {product_name} "
            f"(requested {requested}, available {available})"
        )


class ForbiddenError(MarketplaceError, PermissionError):
    pass


class ConflictError(MarketplaceError):
    pass


class InternalError(MarketplaceError):
    """Persistence failure; the message is safe to show, the cause is logged only."""

    def __init__(self, message: str = "Could not process the order"):
        super().__init__(message)
