"""
Tests for the advisory availability check.
"""

from decimal import Decimal

import pytest

from stockledger import stock
from stockledger.services.availability import check_availability
from stockledger.variants import LineItem


pytestmark = pytest.mark.django_db


def line(product, quantity):
    return LineItem(product=product, quantity=quantity, price=Decimal('1.00'))


class TestCheckAvailability:
    """Tests for check_availability()."""

    def test_enough_stock(self, main, product, stocked):
        stocked(main, product, 10)

        result = check_availability(main, [line(product, 10)])

        assert result.ok
        assert result.shortfalls == []

    def test_untouched_product_counts_as_zero(self, main, product):
        result = check_availability(main, [line(product, 1)])

        assert not result.ok
        assert result.shortfalls[0].as_dict() == {'product': product.pk, 'available': 0, 'required': 1}

    def test_lists_every_short_product_in_order(self, main, product, other_product, stocked):
        stocked(main, product, 2)
        stocked(main, other_product, 1)

        result = check_availability(main, [line(other_product, 3), line(product, 5)])

        assert [s.product_id for s in result.shortfalls] == [other_product.pk, product.pk]
        assert [s.missing for s in result.shortfalls] == [2, 3]

    def test_lines_of_same_product_are_summed(self, main, product, stocked):
        """Two lines of 3 need 6, not 3."""
        stocked(main, product, 5)

        result = check_availability(main, [line(product, 3), line(product, 3)])

        assert not result.ok
        assert result.shortfalls[0].required == 6

    def test_only_source_warehouse_counts(self, main, overflow, product, stocked):
        stocked(overflow, product, 100)

        assert not check_availability(main, [line(product, 1)]).ok

    def test_check_does_not_write(self, main, product, stocked):
        stocked(main, product, 1)

        check_availability(main, [line(product, 5)])

        assert stock.quantity(main, product) == 1


class TestStockAvailable:
    """Tests for stock.available() with mapping items."""

    def test_mapping_items(self, main, product, other_product, stocked):
        stocked(main, product, 4)

        result = stock.available(main, [
            {'product': product, 'quantity': 4},
            {'product': other_product.pk, 'quantity': 1},
        ])

        assert not result.ok
        assert [s.product_id for s in result.shortfalls] == [other_product.pk]
