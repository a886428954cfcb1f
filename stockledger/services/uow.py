"""
Unit of work — one atomic block per transaction create/delete.

Everything written inside commits or rolls back together. Database
failures leave the block as typed stock errors:

    IntegrityError                      → ConflictError (retryable)
    OperationalError, lock/serialization → ConflictError (retryable)
    OperationalError, anything else      → StoreUnavailable
    InterfaceError                       → StoreUnavailable
    DataError, OverflowError             → ValidationError (value out of range)

Nothing here retries; the caller decides whether to resubmit.
"""

import logging
from contextlib import contextmanager

from django.db import DataError, IntegrityError, InterfaceError, OperationalError, transaction

from stockledger.conf import db_alias
from stockledger.exceptions import ConflictError, StoreUnavailable, ValidationError

logger = logging.getLogger('stockledger')

# serialization_failure, deadlock_detected, lock_not_available
CONFLICT_SQLSTATES = {'40001', '40P01', '55P03'}

CONFLICT_MESSAGES = (
    'database is locked',
    'database table is locked',
    'deadlock',
    'could not serialize',
    'could not obtain lock',
    'lock wait timeout',
)


def is_conflict(exc: OperationalError) -> bool:
    """Lock contention or serialization failure, as opposed to an outage."""
    cause = exc.__cause__
    sqlstate = getattr(cause, 'sqlstate', None) or getattr(cause, 'pgcode', None)
    if sqlstate in CONFLICT_SQLSTATES:
        return True
    message = str(exc).lower()
    return any(fragment in message for fragment in CONFLICT_MESSAGES)


@contextmanager
def unit_of_work(using: str | None = None):
    """
    Atomic scope for ledger writes.

    Usage:
        with unit_of_work() as using:
            tx = Transaction.objects.using(using).create(...)
            StockLedger.adjust(warehouse, product, -3, reason='sale', using=using)

    Yields:
        The database alias the block runs on.
    """
    using = db_alias(using)
    try:
        with transaction.atomic(using=using):
            yield using
    except (DataError, OverflowError) as exc:
        # driver rejected a value, e.g. an integer outside the column range
        logger.warning("stock.uow.data_error", extra={"using": using, "error": str(exc)})
        raise ValidationError('INVALID_PAYLOAD', reason=str(exc)) from exc
    except IntegrityError as exc:
        logger.warning("stock.uow.conflict", extra={"using": using, "error": str(exc)})
        raise ConflictError('CONCURRENT_MODIFICATION', reason=str(exc)) from exc
    except OperationalError as exc:
        if is_conflict(exc):
            logger.warning("stock.uow.conflict", extra={"using": using, "error": str(exc)})
            raise ConflictError('CONCURRENT_MODIFICATION', reason=str(exc)) from exc
        logger.error("stock.uow.store_unavailable", extra={"using": using, "error": str(exc)})
        raise StoreUnavailable('STORE_UNAVAILABLE', reason=str(exc)) from exc
    except InterfaceError as exc:
        logger.error("stock.uow.store_unavailable", extra={"using": using, "error": str(exc)})
        raise StoreUnavailable('STORE_UNAVAILABLE', reason=str(exc)) from exc
