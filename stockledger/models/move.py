"""
StockMove model — Immutable ledger of quantity changes.
"""

from django.db import models, router, transaction
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class StockMove(models.Model):
    """
    Immutable record of one quantity change.

    Rules:
    - NEVER update() or delete()
    - Reversals are new moves with inverse delta
    - Updates StockLevel.quantity atomically on save()

    This is the ONLY model that changes quantity.
    """

    level = models.ForeignKey(
        'stockledger.StockLevel',
        on_delete=models.PROTECT,
        related_name='moves',
        verbose_name=_('Stock level'),
    )
    delta = models.IntegerField(
        verbose_name=_('Delta'),
        help_text=_('Positive = in, negative = out'),
    )

    # Originating record, kept as text so it survives transaction deletion
    reference = models.CharField(
        max_length=64,
        blank=True,
        default='',
        db_index=True,
        verbose_name=_('Reference'),
        help_text=_('E.g. "tx:42"'),
    )
    reason = models.CharField(
        max_length=255,
        verbose_name=_('Reason'),
        help_text=_('Required. E.g. "purchase", "reversal of sale"'),
    )

    timestamp = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Timestamp'))

    class Meta:
        verbose_name = _('Stock move')
        verbose_name_plural = _('Stock moves')
        ordering = ['timestamp', 'pk']
        indexes = [
            models.Index(fields=['level', 'timestamp'], name='stockledger_move_level_idx'),
        ]

    def save(self, *args, **kwargs):
        """Save move and update the level cache atomically."""
        if self.pk:
            raise ValueError(
                "Stock moves are immutable. "
                "To correct one, create a new move with the inverse delta."
            )

        if not self.reason:
            raise ValueError("Reason is required")

        using = kwargs.get('using') or router.db_for_write(type(self), instance=self)

        with transaction.atomic(using=using):
            super().save(*args, **kwargs)

            from stockledger.models.stock import StockLevel

            StockLevel.objects.using(using).filter(pk=self.level_id).update(
                quantity=F('quantity') + self.delta,
                updated_at=timezone.now(),
            )

    def delete(self, *args, **kwargs):
        raise ValueError(
            "Stock moves are immutable. "
            "To reverse one, create a new move with the inverse delta."
        )

    def __str__(self) -> str:
        sign = '+' if self.delta > 0 else ''
        return f"{sign}{self.delta} | {self.reason}"
