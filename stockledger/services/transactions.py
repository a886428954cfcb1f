"""
Transaction processor — create and delete purchases, sales and transfers.

State machine per request:

    VALIDATING → CHECKING_AVAILABILITY → COMMITTING → COMMITTED
         │                │                  │
         └──── REJECTED ◄─┘                  └──► ABORTED_ON_WRITE

REJECTED means nothing was written. ABORTED_ON_WRITE means the unit of
work rolled back, so nothing was written either; the caller may retry.
"""

import enum
import logging

from django.db.models import Prefetch

from stockledger.conf import db_alias, stockledger_settings
from stockledger.exceptions import (
    ConflictError,
    InsufficientStock,
    NotFound,
    StockError,
    StoreUnavailable,
    ValidationError,
)
from stockledger.models.transaction import Transaction, TransactionItem
from stockledger.services.availability import check_availability
from stockledger.services.ledger import StockLedger
from stockledger.services.uow import unit_of_work
from stockledger.variants import parse_request, reversal_legs, route_for

logger = logging.getLogger('stockledger')


class ProcessingState(enum.Enum):
    VALIDATING = 'validating'
    CHECKING_AVAILABILITY = 'checking_availability'
    COMMITTING = 'committing'
    COMMITTED = 'committed'
    REJECTED = 'rejected'
    ABORTED_ON_WRITE = 'aborted_on_write'


def _log_state(state: ProcessingState, level=logging.DEBUG, **extra):
    logger.log(level, f"transaction.{state.value}", extra=extra)


def _move_reason(tx_type: str, delta: int) -> str:
    if tx_type == 'transfer':
        return 'transfer out' if delta < 0 else 'transfer in'
    return tx_type


class TransactionProcessor:
    """Create/delete transactions together with their ledger moves."""

    @classmethod
    def create(cls, payload, *, enrich: bool = False, using: str | None = None):
        """
        Validate, check availability, then write record and moves atomically.

        Args:
            payload: {type, date?, party?, source_warehouse?, target_warehouse?,
                      items: [{product, quantity, price}], notes?}
            enrich: Return as_dict(enrich=True) instead of the model

        Returns:
            The committed Transaction (or its enriched dict)

        Raises:
            ValidationError: Incoherent payload, or a quantity out of range (nothing written)
            InsufficientStock: Pre-check shortfall (nothing written)
            ConflictError: Write phase rolled back (retryable)
            StoreUnavailable: Store unreachable
        """
        using = db_alias(using)
        _log_state(ProcessingState.VALIDATING)
        try:
            request = parse_request(payload, using=using)
        except StockError as exc:
            _log_state(ProcessingState.REJECTED, logging.INFO, code=exc.code, data=exc.data)
            raise

        if request.needs_availability:
            _log_state(ProcessingState.CHECKING_AVAILABILITY, warehouse_id=request.route.source.pk)
            with unit_of_work(using) as db:
                availability = check_availability(request.route.source, request.items, using=db)
            if not availability.ok:
                _log_state(
                    ProcessingState.REJECTED, logging.INFO,
                    code='INSUFFICIENT_STOCK',
                    shortfalls=[s.as_dict() for s in availability.shortfalls],
                )
                raise InsufficientStock(availability.shortfalls, warehouse=request.route.source.pk)

        _log_state(ProcessingState.COMMITTING, type=request.type.value, items=len(request.items))
        try:
            with unit_of_work(using) as db:
                fields = {
                    'type': request.type,
                    'party': request.party,
                    'source_warehouse': request.route.source,
                    'target_warehouse': request.route.target,
                    'notes': request.notes,
                }
                if request.date is not None:
                    fields['date'] = request.date
                tx = Transaction.objects.using(db).create(**fields)

                TransactionItem.objects.using(db).bulk_create([
                    TransactionItem(
                        transaction=tx,
                        line=line,
                        product=item.product,
                        quantity=item.quantity,
                        price=item.price,
                    )
                    for line, item in enumerate(request.items)
                ])

                for item in request.items:
                    for warehouse, delta in request.route.legs(item.quantity):
                        StockLedger.adjust(
                            warehouse, item.product, delta,
                            reason=_move_reason(tx.type, delta),
                            reference=tx.reference,
                            using=db,
                        )
        except InsufficientStock as exc:
            _log_state(
                ProcessingState.ABORTED_ON_WRITE, logging.WARNING,
                code='CONCURRENT_MODIFICATION',
                shortfalls=[s.as_dict() for s in exc.shortfalls],
            )
            raise ConflictError(
                'CONCURRENT_MODIFICATION',
                shortfalls=exc.shortfalls,
                warehouse=exc.data.get('warehouse'),
            ) from exc
        except (ConflictError, StoreUnavailable, ValidationError) as exc:
            _log_state(ProcessingState.ABORTED_ON_WRITE, logging.WARNING, code=exc.code)
            raise

        _log_state(ProcessingState.COMMITTED, logging.INFO, transaction_id=tx.pk, type=tx.type)
        tx = cls.get(tx.pk, using=using)
        return tx.as_dict(enrich=True) if enrich else tx

    @classmethod
    def delete(cls, transaction_id, *, enrich: bool = False, using: str | None = None) -> dict:
        """
        Reverse a transaction's ledger moves and delete it, atomically.

        No availability pre-check: reversing a sale or transfer-in only
        adds stock. Reversing a purchase (or the target leg of a
        transfer) whose stock already left is refused by the ledger guard.

        Returns:
            Snapshot of the deleted transaction (as_dict)

        Raises:
            NotFound: No transaction with this id
            ConflictError('REVERSAL_WOULD_GO_NEGATIVE'): Reversal refused
            StoreUnavailable: Store unreachable
        """
        using = db_alias(using)
        pk = cls._parse_pk(transaction_id)

        try:
            with unit_of_work(using) as db:
                tx = Transaction.objects.using(db).select_for_update().filter(pk=pk).first()
                if tx is None:
                    raise NotFound('TRANSACTION_NOT_FOUND', id=pk)

                items = list(tx.items.select_related('product'))
                snapshot = tx.as_dict(enrich=enrich)
                route = route_for(tx)

                _log_state(ProcessingState.COMMITTING, transaction_id=pk, reversal=True)
                for item in items:
                    for warehouse, delta in reversal_legs(route, item.quantity):
                        StockLedger.adjust(
                            warehouse, item.product, delta,
                            reason=f"reversal of {_move_reason(tx.type, -delta)}",
                            reference=tx.reference,
                            using=db,
                        )
                tx.delete()
        except NotFound:
            _log_state(ProcessingState.REJECTED, logging.INFO, code='TRANSACTION_NOT_FOUND', id=pk)
            raise
        except InsufficientStock as exc:
            _log_state(
                ProcessingState.ABORTED_ON_WRITE, logging.WARNING,
                code='REVERSAL_WOULD_GO_NEGATIVE',
                transaction_id=pk,
                shortfalls=[s.as_dict() for s in exc.shortfalls],
            )
            raise ConflictError(
                'REVERSAL_WOULD_GO_NEGATIVE',
                shortfalls=exc.shortfalls,
                warehouse=exc.data.get('warehouse'),
                transaction_id=pk,
            ) from exc
        except (ConflictError, StoreUnavailable, ValidationError) as exc:
            _log_state(ProcessingState.ABORTED_ON_WRITE, logging.WARNING, code=exc.code)
            raise

        _log_state(ProcessingState.COMMITTED, logging.INFO, transaction_id=pk, deleted=True)
        return snapshot

    @classmethod
    def get(cls, transaction_id, using: str | None = None) -> Transaction:
        """Transaction with references selected and items prefetched."""
        pk = cls._parse_pk(transaction_id)
        tx = cls._queryset(using).filter(pk=pk).first()
        if tx is None:
            raise NotFound('TRANSACTION_NOT_FOUND', id=pk)
        return tx

    @classmethod
    def list(cls, limit: int | None = None, using: str | None = None) -> list[Transaction]:
        """Newest first, capped at TRANSACTION_LIST_LIMIT."""
        cap = stockledger_settings.TRANSACTION_LIST_LIMIT
        limit = min(limit, cap) if limit else cap
        return list(cls._queryset(using).order_by('-created_at', '-pk')[:limit])

    @classmethod
    def _queryset(cls, using):
        qs = Transaction.objects.using(db_alias(using))
        return qs.select_related('party', 'source_warehouse', 'target_warehouse').prefetch_related(
            Prefetch('items', queryset=TransactionItem.objects.select_related('product'))
        )

    @classmethod
    def _parse_pk(cls, transaction_id):
        value = getattr(transaction_id, 'pk', transaction_id)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise NotFound('TRANSACTION_NOT_FOUND', id=str(transaction_id)) from None
