"""
Enums for Stockledger models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class TransactionType(models.TextChoices):
    """
    Kind of stock transaction.

    PURCHASE: Stock enters the target warehouse (from a supplier).
    SALE:     Stock leaves the source warehouse (to a customer).
    TRANSFER: Stock leaves the source warehouse and enters the target one.
    """
    PURCHASE = 'purchase', _('Purchase')
    SALE = 'sale', _('Sale')
    TRANSFER = 'transfer', _('Transfer')


class PartyType(models.TextChoices):
    SUPPLIER = 'supplier', _('Supplier')
    CUSTOMER = 'customer', _('Customer')
