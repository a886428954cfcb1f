"""
Exceptions for Stockledger.

All errors are StockError subclasses with a structured code for programmatic
handling. The subclass is the error *kind* (what the caller should do about
it); the code says exactly which rule failed.
"""

from decimal import Decimal
from typing import Any


class StockError(Exception):
    """
    Structured exception for stock operations.

    Usage:
        try:
            stock.create_transaction(payload)
        except InsufficientStock as e:
            for shortfall in e.shortfalls:
                print(f"{shortfall.product}: {shortfall.available} < {shortfall.required}")
        except StockError as e:
            return JsonResponse(e.as_dict(), status=e.status)

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    kind = 'StockError'
    status = 400
    retryable = False

    _default_messages = {
        'INVALID_PAYLOAD': 'Invalid transaction payload',
        'INVALID_TYPE': 'Transaction type must be purchase, sale or transfer',
        'MISSING_WAREHOUSE': 'Required warehouse is missing for this transaction type',
        'SAME_WAREHOUSE': 'Source and target warehouses must differ',
        'NO_ITEMS': 'Transaction must have at least one line item',
        'INVALID_QUANTITY': 'Quantity must be a positive integer',
        'QUANTITY_OUT_OF_RANGE': 'Resulting stock quantity is out of range',
        'INVALID_PRICE': 'Price must be a non-negative number',
        'UNKNOWN_REFERENCE': 'Referenced record does not exist',
        'INSUFFICIENT_STOCK': 'Insufficient stock',
        'TRANSACTION_NOT_FOUND': 'Transaction not found',
        'CONCURRENT_MODIFICATION': 'Stock changed concurrently, retry the request',
        'REVERSAL_WOULD_GO_NEGATIVE': 'Reversal would drive stock negative',
        'STORE_UNAVAILABLE': 'Stock store unavailable',
    }

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    @property
    def shortfalls(self) -> list:
        """Shortcut for data['shortfalls']."""
        return self.data.get('shortfalls', [])

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'kind': self.kind,
            'code': self.code,
            'message': self.message,
            'status': self.status,
            'retryable': self.retryable,
            'data': {k: _serialize(v) for k, v in self.data.items()},
        }


class ValidationError(StockError):
    """Incoherent request: nothing was written."""

    kind = 'ValidationError'
    status = 400


class InsufficientStock(StockError):
    """Requested quantities exceed what the source warehouse holds."""

    kind = 'InsufficientStock'
    status = 400

    def __init__(self, shortfalls, code: str = 'INSUFFICIENT_STOCK',
                 message: str | None = None, **data):
        super().__init__(code, message, shortfalls=list(shortfalls), **data)


class NotFound(StockError):
    kind = 'NotFound'
    status = 404


class ConflictError(StockError):
    """The unit of work was rolled back; resubmitting may succeed."""

    kind = 'ConflictError'
    status = 409
    retryable = True


class StoreUnavailable(StockError):
    kind = 'StoreUnavailable'
    status = 503


def _serialize(value):
    if isinstance(value, Decimal):
        return str(value)
    if hasattr(value, 'as_dict'):
        return value.as_dict()
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return value
