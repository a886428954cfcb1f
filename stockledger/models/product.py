"""
Product and Category models — catalog records referenced by stock.
"""

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class Category(models.Model):
    name = models.CharField(max_length=100, unique=True, verbose_name=_('Name'))
    description = models.TextField(blank=True, default='', verbose_name=_('Description'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Category')
        verbose_name_plural = _('Categories')
        ordering = ['name']

    def __str__(self) -> str:
        return self.name


class Product(models.Model):
    """
    Sellable/stockable product.

    Read-only to the stock engine. `min_quantity` is the reorder point
    used by low-stock alerts; `price` is informational only and never
    affects quantities.
    """

    name = models.CharField(max_length=200, verbose_name=_('Name'))
    sku = models.CharField(max_length=64, unique=True, verbose_name=_('SKU'))
    barcode = models.CharField(max_length=64, blank=True, default='', verbose_name=_('Barcode'))
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products',
        verbose_name=_('Category'),
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name=_('Price'),
    )
    min_quantity = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name=_('Minimum quantity'),
        help_text=_('Reorder point. Empty = use STOCKLEDGER["DEFAULT_MIN_QUANTITY"].'),
    )
    expiration_date = models.DateField(null=True, blank=True, verbose_name=_('Expiration date'))
    description = models.TextField(blank=True, default='', verbose_name=_('Description'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Product')
        verbose_name_plural = _('Products')
        ordering = ['name']

    def as_dict(self) -> dict:
        return {
            'id': self.pk,
            'name': self.name,
            'sku': self.sku,
            'price': str(self.price),
            'min_quantity': self.min_quantity,
        }

    def __str__(self) -> str:
        return f"{self.name} ({self.sku})"
