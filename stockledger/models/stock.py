"""
StockLevel model — Quantity cache per (product, warehouse).
"""

import logging

from django.db import models
from django.db.models import BooleanField, Case, F, Q, Sum, Value, When
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _

logger = logging.getLogger('stockledger')

# IntegerField range on every supported backend
MAX_QUANTITY = 2**31 - 1


def low_stock_q(default_min: int | None = None) -> Q:
    """
    Condition for rows at or below the product's reorder point.

    Products without min_quantity fall back to default_min;
    with no fallback they never alert.
    """
    own = Q(product__min_quantity__isnull=False, quantity__lte=F('product__min_quantity'))
    if default_min is None:
        return own
    return own | Q(product__min_quantity__isnull=True, quantity__lte=default_min)


class StockLevelQuerySet(models.QuerySet):
    """QuerySet with helper filters for StockLevel queries."""

    def non_empty(self):
        return self.filter(quantity__gt=0)

    def with_low_stock_flag(self, default_min: int | None = None):
        """Annotate is_low_stock on every row."""
        return self.annotate(
            is_low_stock=Case(
                When(low_stock_q(default_min), then=Value(True)),
                default=Value(False),
                output_field=BooleanField(),
            )
        )


class StockLevel(models.Model):
    """
    Quantity of a product in a warehouse.

    Invariants:
    - At most one row per (product, warehouse); absence means quantity 0
    - Rows are created lazily on the first adjustment and never deleted
    - quantity >= 0, enforced by the ledger guard and by a check constraint

    Performance:
    - quantity is a cache updated atomically by StockMove
    - Read is O(1), not O(N)
    - Use recalculate() for audit/correction
    """

    product = models.ForeignKey(
        'stockledger.Product',
        on_delete=models.PROTECT,
        related_name='stock_levels',
        verbose_name=_('Product'),
    )
    warehouse = models.ForeignKey(
        'stockledger.Warehouse',
        on_delete=models.PROTECT,
        related_name='stock_levels',
        verbose_name=_('Warehouse'),
    )

    # Quantity cache (updated atomically by StockMove)
    quantity = models.IntegerField(default=0, verbose_name=_('Quantity'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = StockLevelQuerySet.as_manager()

    class Meta:
        verbose_name = _('Stock level')
        verbose_name_plural = _('Stock levels')
        constraints = [
            models.UniqueConstraint(
                fields=['product', 'warehouse'],
                name='unique_stock_level',
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=0),
                name='stock_level_non_negative',
            ),
        ]
        indexes = [
            models.Index(fields=['warehouse', 'product'], name='stockledger_level_wh_idx'),
        ]

    def recalculate(self) -> int:
        """
        Recalculate quantity from moves.

        Use for:
        - Integrity audit
        - Correction after detected inconsistency

        Returns:
            New calculated quantity
        """
        total = self.moves.aggregate(t=Coalesce(Sum('delta'), 0))['t']

        if total != self.quantity:
            old = self.quantity
            self.quantity = total
            self.save(update_fields=['quantity', 'updated_at'])
            logger.warning(
                "StockLevel %s recalculated: %s -> %s (diff: %s)",
                self.pk, old, total, total - old,
            )

        return total

    def __str__(self) -> str:
        return f"{self.product} @ {self.warehouse}: {self.quantity}"
