"""
Pytest fixtures for Stockledger tests.
"""

from decimal import Decimal

import pytest

from stockledger.models import Category, Party, PartyType, Product, Warehouse
from stockledger.services.ledger import StockLedger


@pytest.fixture
def category(db):
    """Create a test category."""
    return Category.objects.create(name='Hardware')


@pytest.fixture
def product(db, category):
    """Create a test product without a reorder point."""
    return Product.objects.create(
        name='Bolt M6',
        sku='BOLT-M6',
        category=category,
        price=Decimal('0.10'),
    )


@pytest.fixture
def other_product(db, category):
    """Create a second product with a reorder point of 5."""
    return Product.objects.create(
        name='Nut M6',
        sku='NUT-M6',
        category=category,
        price=Decimal('0.05'),
        min_quantity=5,
    )


@pytest.fixture
def main(db):
    """Main warehouse."""
    return Warehouse.objects.create(name='Main', code='main', location='Dock A')


@pytest.fixture
def overflow(db):
    """Overflow warehouse."""
    return Warehouse.objects.create(name='Overflow', code='overflow')


@pytest.fixture
def supplier(db):
    return Party.objects.create(type=PartyType.SUPPLIER, name='Acme Fasteners')


@pytest.fixture
def customer(db):
    return Party.objects.create(type=PartyType.CUSTOMER, name='Jane Builder')


@pytest.fixture
def stocked():
    """Put stock in place through the ledger: stocked(warehouse, product, qty)."""
    def _stocked(warehouse, product, quantity):
        return StockLedger.adjust(warehouse, product, quantity, reason='initial count')
    return _stocked
