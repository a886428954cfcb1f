"""
Transaction model — Durable log of purchases, sales and transfers.
"""

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import TransactionType


class Transaction(models.Model):
    """
    One committed stock transaction.

    Rules:
    - Written only by TransactionProcessor, together with its ledger moves
    - Never amended; deletion reverses its ledger moves first

    Warehouse fields by type:
    - purchase: target only
    - sale: source only
    - transfer: source and target, different
    """

    type = models.CharField(
        max_length=20,
        choices=TransactionType.choices,
        db_index=True,
        verbose_name=_('Type'),
    )
    date = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Date'))
    party = models.ForeignKey(
        'stockledger.Party',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='transactions',
        verbose_name=_('Party'),
    )
    source_warehouse = models.ForeignKey(
        'stockledger.Warehouse',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='outgoing_transactions',
        verbose_name=_('Source warehouse'),
    )
    target_warehouse = models.ForeignKey(
        'stockledger.Warehouse',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='incoming_transactions',
        verbose_name=_('Target warehouse'),
    )
    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Transaction')
        verbose_name_plural = _('Transactions')
        ordering = ['-created_at', '-pk']
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(type=TransactionType.PURCHASE,
                      source_warehouse__isnull=True, target_warehouse__isnull=False)
                    | Q(type=TransactionType.SALE,
                        source_warehouse__isnull=False, target_warehouse__isnull=True)
                    | (Q(type=TransactionType.TRANSFER,
                         source_warehouse__isnull=False, target_warehouse__isnull=False)
                       & ~Q(source_warehouse=F('target_warehouse')))
                ),
                name='transaction_warehouses_match_type',
            ),
        ]

    @property
    def reference(self) -> str:
        """Reference stamped on the ledger moves of this transaction."""
        return f"tx:{self.pk}"

    def as_dict(self, enrich: bool = False) -> dict:
        """
        Serialize with items.

        enrich=True resolves product/warehouse/party into summaries,
        otherwise they are plain ids.
        """
        def ref(obj, pk):
            if obj is None:
                return None
            return obj.as_dict() if enrich else pk

        return {
            'id': self.pk,
            'type': self.type,
            'date': self.date.isoformat() if self.date else None,
            'party': ref(self.party, self.party_id),
            'source_warehouse': ref(self.source_warehouse, self.source_warehouse_id),
            'target_warehouse': ref(self.target_warehouse, self.target_warehouse_id),
            'items': [
                {
                    'product': item.product.as_dict() if enrich else item.product_id,
                    'quantity': item.quantity,
                    'price': str(item.price),
                }
                for item in self.items.all()
            ],
            'notes': self.notes,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __str__(self) -> str:
        return f"{self.get_type_display()} #{self.pk}"


class TransactionItem(models.Model):
    """Line item: product, quantity and unit price. Ordered by line."""

    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.CASCADE,
        related_name='items',
        verbose_name=_('Transaction'),
    )
    line = models.PositiveIntegerField(verbose_name=_('Line'))
    product = models.ForeignKey(
        'stockledger.Product',
        on_delete=models.PROTECT,
        related_name='transaction_items',
        verbose_name=_('Product'),
    )
    quantity = models.PositiveIntegerField(verbose_name=_('Quantity'))
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name=_('Unit price'),
    )

    class Meta:
        verbose_name = _('Transaction item')
        verbose_name_plural = _('Transaction items')
        ordering = ['line']
        constraints = [
            models.UniqueConstraint(
                fields=['transaction', 'line'],
                name='unique_transaction_line',
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=1),
                name='transaction_item_quantity_positive',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.product} @ {self.price}"
