"""
Stock queries — read-only operations.

All methods are classmethods and use no locking.
"""

from django.db.models import Sum
from django.db.models.functions import Coalesce

from stockledger.conf import db_alias, stockledger_settings
from stockledger.models.move import StockMove
from stockledger.models.stock import StockLevel


class StockQueries:
    """Read-only stock query methods."""

    @classmethod
    def levels(cls, warehouse=None, product=None, include_empty: bool = True,
               using: str | None = None):
        """
        Stock levels with product/warehouse selected.

        Each row is annotated with is_low_stock (quantity at or below
        the product's reorder point).
        """
        qs = (
            StockLevel.objects.using(db_alias(using))
            .select_related('product', 'warehouse')
            .with_low_stock_flag(stockledger_settings.DEFAULT_MIN_QUANTITY)
        )

        if warehouse is not None:
            qs = qs.filter(warehouse=warehouse)

        if product is not None:
            qs = qs.filter(product=product)

        if not include_empty:
            qs = qs.non_empty()

        return qs.order_by('warehouse__name', 'product__name')

    @classmethod
    def low_stock(cls, warehouse=None, using: str | None = None):
        """Levels at or below the reorder point."""
        return cls.levels(warehouse=warehouse, using=using).filter(is_low_stock=True)

    @classmethod
    def total(cls, product, using: str | None = None) -> int:
        """Quantity of a product summed over all warehouses."""
        return StockLevel.objects.using(db_alias(using)).filter(product=product).aggregate(
            t=Coalesce(Sum('quantity'), 0)
        )['t']

    @classmethod
    def moves(cls, warehouse=None, product=None, reference: str | None = None,
              using: str | None = None):
        """Ledger moves, oldest first."""
        qs = StockMove.objects.using(db_alias(using)).select_related('level__product', 'level__warehouse')

        if warehouse is not None:
            qs = qs.filter(level__warehouse=warehouse)

        if product is not None:
            qs = qs.filter(level__product=product)

        if reference is not None:
            qs = qs.filter(reference=reference)

        return qs
