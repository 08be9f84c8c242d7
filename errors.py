"""Exceptions raised by the POS engine.

Every error carries a single human-readable ``message`` suitable for showing to
the cashier, plus optional ``details`` for logs.
"""


class PosError(Exception):
    def __init__(self, message, details=None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(PosError):
    """A checkout precondition or user input is not satisfied. Nothing was changed."""
    pass


class InsufficientStock(PosError):
    """Requested cart quantity exceeds the product's on-hand stock."""

    def __init__(self, product, requested):
        self.product = product
        self.requested = requested
        super().__init__(
            f"Only {product.quantity} units of {product.name} available",
            {"product_id": product.id, "requested": requested, "available": product.quantity},
        )


class PersistenceError(PosError):
    """A collaborator failed to store stock, the sale document or the ledger entry."""
    pass


class PermissionDenied(PosError):
    pass


class InvalidTransition(PosError):
    pass


class ShiftError(PosError):
    pass


class ReceiptActionError(PosError):
    pass
