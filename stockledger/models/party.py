"""
Party model — supplier or customer on the other side of a transaction.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from stockledger.models.enums import PartyType


class Party(models.Model):
    type = models.CharField(
        max_length=20,
        choices=PartyType.choices,
        db_index=True,
        verbose_name=_('Type'),
    )
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    email = models.EmailField(blank=True, default='', verbose_name=_('Email'))
    phone = models.CharField(max_length=40, blank=True, default='', verbose_name=_('Phone'))
    address = models.TextField(blank=True, default='', verbose_name=_('Address'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Party')
        verbose_name_plural = _('Parties')
        ordering = ['name']

    def as_dict(self) -> dict:
        return {'id': self.pk, 'type': self.type, 'name': self.name}

    def __str__(self) -> str:
        return f"{self.name} ({self.get_type_display()})"
