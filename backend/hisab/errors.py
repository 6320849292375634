"""
Typed failures raised by the ledger's repositories and services.

Every error carries ``changed``: ``False`` means the store was left exactly
as it was before the call (the caller can simply re-prompt), ``True`` means
a write may have partially reached the store and the caller should re-read
before retrying.
"""


class LedgerError(Exception):
    """Base class for all ledger failures."""

    def __init__(self, message: str, changed: bool = False):
        super().__init__(message)
        self.message = message
        self.changed = changed

    def to_dict(self) -> dict:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "changed": self.changed,
        }


class ValidationError(LedgerError):
    """Caller-supplied data violates a precondition."""


class InsufficientStock(LedgerError):
    """Requested quantity exceeds the units on hand."""

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            f"Not enough stock for product {product_id}. "
            f"Requested={requested} Available={available}"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class NotFound(LedgerError):
    """A referenced entity does not exist."""

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class FormatError(LedgerError):
    """Malformed or incomplete backup document."""


class StorageFailure(LedgerError):
    """The underlying store failed (disk, corruption, locked file)."""
