"""
Warehouse model — Where stock exists.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Warehouse(models.Model):
    """
    A place that holds stock.

    Warehouses are stable entities managed by the host project.
    The stock engine only reads them.

    Examples:
        Warehouse.objects.create(name='Main', code='main', location='Lisbon')
        Warehouse.objects.create(name='Overflow')
    """

    name = models.CharField(
        max_length=100,
        verbose_name=_('Name'),
    )
    location = models.CharField(
        max_length=255,
        blank=True,
        default='',
        verbose_name=_('Location'),
    )
    code = models.SlugField(
        max_length=50,
        unique=True,
        null=True,
        blank=True,
        verbose_name=_('Code'),
        help_text=_('Optional short identifier (e.g. main, overflow)'),
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Warehouse')
        verbose_name_plural = _('Warehouses')
        ordering = ['name']

    def as_dict(self) -> dict:
        return {'id': self.pk, 'name': self.name, 'code': self.code, 'location': self.location}

    def __str__(self) -> str:
        return self.name
