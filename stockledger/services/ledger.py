"""
Stock ledger — the only writer of StockLevel quantities.

Every change goes through adjust(), which records an immutable StockMove.
Reads never lock.
"""

import logging
from dataclasses import dataclass

from django.db import transaction

from stockledger.conf import db_alias
from stockledger.exceptions import InsufficientStock, ValidationError
from stockledger.models.move import StockMove
from stockledger.models.stock import MAX_QUANTITY, StockLevel

logger = logging.getLogger('stockledger')


@dataclass(frozen=True)
class Shortfall:
    """Deficit of one product: what is there vs what was asked for."""

    product: object
    available: int
    required: int

    @property
    def product_id(self):
        return _pk(self.product)

    @property
    def missing(self) -> int:
        return self.required - self.available

    def as_dict(self) -> dict:
        return {
            'product': self.product_id,
            'available': self.available,
            'required': self.required,
        }


def _pk(value):
    return value.pk if hasattr(value, 'pk') else value


class StockLedger:
    """Per-(product, warehouse) quantities."""

    @classmethod
    def adjust(cls, warehouse, product, delta: int, *, reason: str,
               reference: str = '', using: str | None = None) -> int:
        """
        Apply a signed delta to the (product, warehouse) level.

        Creates the level at 0 on first use. Joins the caller's atomic
        block as a savepoint, so a surrounding unit of work rolls it back
        with everything else.

        Returns:
            The new quantity

        Raises:
            ValidationError('INVALID_QUANTITY'): If delta is zero, not an int or out of range
            ValidationError('QUANTITY_OUT_OF_RANGE'): If the result would not fit the column
            InsufficientStock: If the result would be negative

        Concurrency:
            - Uses get_or_create (unique constraint settles racing inserts)
            - Uses select_for_update() on the level before the guard check
            - StockMove.save() updates quantity with F()
        """
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            raise ValidationError('INVALID_QUANTITY', delta=delta)
        if abs(delta) > MAX_QUANTITY:
            raise ValidationError('INVALID_QUANTITY', delta=delta, limit=MAX_QUANTITY)

        using = db_alias(using)

        with transaction.atomic(using=using):
            level, created = StockLevel.objects.using(using).get_or_create(
                warehouse_id=_pk(warehouse),
                product_id=_pk(product),
            )
            locked = StockLevel.objects.using(using).select_for_update().get(pk=level.pk)

            new_quantity = locked.quantity + delta
            if new_quantity < 0:
                logger.info(
                    "stock.adjust.rejected",
                    extra={
                        "warehouse_id": _pk(warehouse),
                        "product_id": _pk(product),
                        "available": locked.quantity,
                        "delta": delta,
                    },
                )
                raise InsufficientStock(
                    [Shortfall(product=product, available=locked.quantity, required=-delta)],
                    warehouse=_pk(warehouse),
                )
            if new_quantity > MAX_QUANTITY:
                raise ValidationError(
                    'QUANTITY_OUT_OF_RANGE',
                    warehouse=_pk(warehouse),
                    product=_pk(product),
                    quantity=locked.quantity,
                    delta=delta,
                    limit=MAX_QUANTITY,
                )

            StockMove.objects.using(using).create(
                level=locked,
                delta=delta,
                reason=reason,
                reference=reference,
            )
            logger.info(
                "stock.adjust",
                extra={
                    "warehouse_id": _pk(warehouse),
                    "product_id": _pk(product),
                    "delta": delta,
                    "quantity": new_quantity,
                    "reference": reference,
                    "level_id": locked.pk,
                },
            )
            return new_quantity

    @classmethod
    def current_quantity(cls, warehouse, product, using: str | None = None) -> int:
        """Quantity on hand; 0 if the pair was never touched."""
        quantity = (
            StockLevel.objects.using(db_alias(using))
            .filter(warehouse_id=_pk(warehouse), product_id=_pk(product))
            .values_list('quantity', flat=True)
            .first()
        )
        return quantity or 0

    @classmethod
    def current_quantities(cls, warehouse, products, using: str | None = None) -> dict:
        """
        Batch read for one warehouse.

        Returns:
            {product_pk: quantity} with 0 for every product without a level
        """
        pks = [_pk(p) for p in products]
        rows = (
            StockLevel.objects.using(db_alias(using))
            .filter(warehouse_id=_pk(warehouse), product_id__in=pks)
            .values_list('product_id', 'quantity')
        )
        quantities = dict.fromkeys(pks, 0)
        quantities.update(rows)
        return quantities
