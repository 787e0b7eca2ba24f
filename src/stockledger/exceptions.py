"""Error taxonomy for stock operations.

Every error carries a ``kind`` drawn from the API contract and a human-readable
``message`` that tells the caller what to correct. None of these are retried by
the engine; the caller decides whether to resubmit with corrected input.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class StockLedgerError(Exception):
    """Base class for all rejected stock operations."""

    kind = "Internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class NotFoundError(StockLedgerError):
    """A referenced stock record, product or warehouse does not exist."""

    kind = "NotFound"


class DuplicateKeyError(StockLedgerError):
    """A live stock record already exists for the (product, variant, warehouse) key."""

    kind = "DuplicateKey"


class InvalidArgumentError(StockLedgerError):
    """Non-positive amount, negative quantity or reorder point, blank reason."""

    kind = "InvalidArgument"


class InsufficientStockError(StockLedgerError):
    """A deduction would drive quantity below zero."""

    kind = "InsufficientStock"

    def __init__(self, requested: int, available: int):
        super().__init__(f"Cannot deduct {requested}, only {available} in stock")
        self.requested = requested
        self.available = available


class StoreUnavailableError(StockLedgerError):
    """The store stayed unreachable past the retry bound, or a record lock timed out."""

    kind = "Internal"


class CollaboratorUnavailableError(Exception):
    """Raised by catalog/warehouse adapters when a lookup itself fails."""


def _flatten_messages(messages) -> str:
    if isinstance(messages, dict):
        parts = []
        for field, errors in messages.items():
            errors = errors if isinstance(errors, (list, tuple)) else [errors]
            parts.append(f"{field}: {', '.join(str(e) for e in errors)}")
        return "; ".join(parts)
    return str(messages)


def describe_error(exc: Exception) -> dict:
    """Translate any exception into the ``{kind, message}`` error contract."""
    if isinstance(exc, StockLedgerError):
        return exc.to_dict()
    if isinstance(exc, ValidationError):
        return {"kind": "InvalidArgument", "message": _flatten_messages(exc.messages)}
    if isinstance(exc, ObjectNotFoundError):
        return {"kind": "NotFound", "message": _flatten_messages(getattr(exc, "messages", str(exc)))}
    return {"kind": "Internal", "message": "Internal error"}
