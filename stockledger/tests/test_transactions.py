"""
Tests for transaction create/delete through the Stock service.
"""

import logging
import threading
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.db import IntegrityError, connections, transaction

from stockledger import stock
from stockledger.exceptions import (
    ConflictError,
    InsufficientStock,
    NotFound,
    StockError,
    ValidationError,
)
from stockledger.models import StockMove, Transaction, TransactionItem, TransactionType
from stockledger.models.stock import MAX_QUANTITY
from stockledger.services.availability import Availability
from stockledger.tests.payloads import purchase, sale, transfer


pytestmark = pytest.mark.django_db


@pytest.fixture
def stale_precheck(monkeypatch):
    """Make the advisory check pass, as if it read before a concurrent write."""
    monkeypatch.setattr(
        'stockledger.services.transactions.check_availability',
        lambda warehouse, items, using=None: Availability(ok=True),
    )


class TestScenarios:
    """End-to-end walk: purchase, failed sale, sale, transfer, delete."""

    def test_purchase_into_empty_warehouse(self, main, product):
        tx = stock.create_transaction(purchase(main, (product, 10, '5')))

        assert tx.type == TransactionType.PURCHASE
        assert stock.quantity(main, product) == 10

    def test_sale_beyond_stock_is_rejected(self, main, product, stocked):
        stocked(main, product, 10)

        with pytest.raises(InsufficientStock) as exc:
            stock.create_transaction(sale(main, (product, 15)))

        assert exc.value.as_dict()['data']['shortfalls'] == [
            {'product': product.pk, 'available': 10, 'required': 15},
        ]
        assert stock.quantity(main, product) == 10
        assert not Transaction.objects.exists()

    def test_sale_within_stock(self, main, product, stocked):
        stocked(main, product, 10)

        stock.create_transaction(sale(main, (product, 4)))

        assert stock.quantity(main, product) == 6

    def test_transfer_everything(self, main, overflow, product, stocked):
        stocked(main, product, 6)

        stock.create_transaction(transfer(main, overflow, (product, 6)))

        assert stock.quantity(main, product) == 0
        assert stock.quantity(overflow, product) == 6

    def test_delete_transfer_restores_both_sides(self, main, overflow, product, stocked):
        stocked(main, product, 6)
        tx = stock.create_transaction(transfer(main, overflow, (product, 6)))

        stock.delete_transaction(tx.pk)

        assert stock.quantity(main, product) == 6
        assert stock.quantity(overflow, product) == 0
        assert not Transaction.objects.filter(pk=tx.pk).exists()

    def test_competing_sales_one_wins(self, main, product, stocked, stale_precheck):
        """Both pass the pre-check; the ledger guard lets only one through."""
        stocked(main, product, 10)

        stock.create_transaction(sale(main, (product, 6)))
        with pytest.raises(ConflictError) as exc:
            stock.create_transaction(sale(main, (product, 6)))

        assert exc.value.code == 'CONCURRENT_MODIFICATION'
        assert exc.value.retryable
        assert exc.value.shortfalls[0].available == 4
        assert stock.quantity(main, product) == 4
        assert Transaction.objects.count() == 1


@pytest.mark.django_db(transaction=True)
class TestConcurrentSales:
    """Two sales race for the same stock on separate connections."""

    def test_exactly_one_wins(self, main, product, stocked):
        stocked(main, product, 10)
        barrier = threading.Barrier(2)
        outcomes = []

        def sell():
            try:
                barrier.wait(timeout=5)
                stock.create_transaction(sale(main, (product, 6)))
                outcomes.append('committed')
            except StockError as exc:
                outcomes.append(exc.kind)
            finally:
                connections.close_all()

        threads = [threading.Thread(target=sell) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert sorted(outcomes) in (
            ['ConflictError', 'committed'],
            ['InsufficientStock', 'committed'],
        )
        assert stock.quantity(main, product) == 4
        assert Transaction.objects.count() == 1


class TestCreate:
    """Tests for stock.create_transaction()."""

    def test_items_are_stored_in_order(self, main, product, other_product):
        tx = stock.create_transaction(
            purchase(main, (other_product, 2, '0.05'), (product, 3, '0.10'))
        )

        items = list(tx.items.all())
        assert [(i.line, i.product, i.quantity) for i in items] == [
            (0, other_product, 2),
            (1, product, 3),
        ]
        assert items[1].price == Decimal('0.10')

    def test_moves_reference_the_transaction(self, main, overflow, product, stocked):
        stocked(main, product, 5)

        tx = stock.create_transaction(transfer(main, overflow, (product, 5)))

        moves = list(stock.moves(reference=tx.reference))
        assert [(m.level.warehouse, m.delta, m.reason) for m in moves] == [
            (main, -5, 'transfer out'),
            (overflow, 5, 'transfer in'),
        ]

    def test_transfer_conserves_total(self, main, overflow, product, stocked):
        stocked(main, product, 9)
        stocked(overflow, product, 1)

        stock.create_transaction(transfer(main, overflow, (product, 7)))

        assert stock.total(product) == 10

    def test_purchase_ignores_source_warehouse(self, main, overflow, product):
        tx = stock.create_transaction(purchase(main, (product, 1), source_warehouse=overflow.pk))

        assert tx.source_warehouse is None
        assert tx.target_warehouse == main

    def test_sale_ignores_target_warehouse(self, main, overflow, product, stocked):
        stocked(main, product, 1)

        tx = stock.create_transaction(sale(main, (product, 1), target_warehouse=overflow.pk))

        assert tx.target_warehouse is None
        assert stock.quantity(overflow, product) == 0

    def test_party_date_and_notes(self, main, product, supplier):
        tx = stock.create_transaction(purchase(
            main, (product, 1),
            party=supplier.pk, date='2024-03-01T10:30:00', notes='Restock',
        ))

        assert tx.party == supplier
        assert tx.date == datetime(2024, 3, 1, 10, 30, tzinfo=dt_timezone.utc)
        assert tx.notes == 'Restock'

    def test_enriched_response(self, main, product, customer, stocked):
        stocked(main, product, 2)

        data = stock.create_transaction(sale(main, (product, 2, '1.50'), party=customer), enrich=True)

        assert data['type'] == 'sale'
        assert data['source_warehouse'] == main.as_dict()
        assert data['target_warehouse'] is None
        assert data['party']['name'] == 'Jane Builder'
        assert data['items'] == [{'product': product.as_dict(), 'quantity': 2, 'price': '1.50'}]

    def test_plain_response_uses_ids(self, main, product):
        tx = stock.create_transaction(purchase(main, (product, 2)))

        data = tx.as_dict()
        assert data['target_warehouse'] == main.pk
        assert data['items'][0]['product'] == product.pk

    def test_shortfalls_list_every_product(self, main, product, other_product, stocked):
        stocked(main, product, 1)

        with pytest.raises(InsufficientStock) as exc:
            stock.create_transaction(sale(main, (product, 2), (other_product, 3)))

        assert [s.product_id for s in exc.value.shortfalls] == [product.pk, other_product.pk]

    def test_failed_leg_rolls_back_everything(self, main, overflow, product, other_product,
                                              stocked, stale_precheck):
        """Second line fails at write time: no record, no moves, no deltas."""
        stocked(main, product, 5)
        moves_before = StockMove.objects.count()

        with pytest.raises(ConflictError):
            stock.create_transaction(transfer(main, overflow, (product, 5), (other_product, 1)))

        assert stock.quantity(main, product) == 5
        assert stock.quantity(overflow, product) == 0
        assert StockMove.objects.count() == moves_before
        assert not Transaction.objects.exists()
        assert not TransactionItem.objects.exists()

    def test_validation_error_writes_nothing(self, main, product):
        with pytest.raises(StockError) as exc:
            stock.create_transaction(purchase(main, (product, 0)))

        assert exc.value.code == 'INVALID_QUANTITY'
        assert not Transaction.objects.exists()
        assert not StockMove.objects.exists()

    def test_purchase_past_column_range_writes_nothing(self, main, product, stocked):
        stocked(main, product, MAX_QUANTITY - 5)

        with pytest.raises(ValidationError) as exc:
            stock.create_transaction(purchase(main, (product, 10)))

        assert exc.value.code == 'QUANTITY_OUT_OF_RANGE'
        assert stock.quantity(main, product) == MAX_QUANTITY - 5
        assert not Transaction.objects.exists()

    def test_commit_is_logged(self, main, product, caplog):
        caplog.set_level(logging.INFO, logger='stockledger')

        tx = stock.create_transaction(purchase(main, (product, 1)))

        committed = [r for r in caplog.records if r.getMessage() == 'transaction.committed']
        assert committed and committed[0].transaction_id == tx.pk


class TestDelete:
    """Tests for stock.delete_transaction()."""

    def test_delete_sale_restores_stock(self, main, product, stocked):
        stocked(main, product, 10)
        tx = stock.create_transaction(sale(main, (product, 4)))

        snapshot = stock.delete_transaction(tx.pk)

        assert stock.quantity(main, product) == 10
        assert snapshot['id'] == tx.pk
        assert snapshot['items'][0]['quantity'] == 4

    def test_delete_purchase_removes_stock(self, main, product):
        tx = stock.create_transaction(purchase(main, (product, 10)))

        stock.delete_transaction(tx)

        assert stock.quantity(main, product) == 0

    def test_reversal_appends_moves(self, main, product, stocked):
        stocked(main, product, 3)
        tx = stock.create_transaction(sale(main, (product, 3)))
        reference = tx.reference

        stock.delete_transaction(tx.pk)

        moves = list(stock.moves(reference=reference))
        assert [(m.delta, m.reason) for m in moves] == [(-3, 'sale'), (3, 'reversal of sale')]

    def test_reversal_would_go_negative(self, main, product):
        """Purchased stock already sold: deleting the purchase is refused."""
        tx = stock.create_transaction(purchase(main, (product, 10)))
        stock.create_transaction(sale(main, (product, 8)))

        with pytest.raises(ConflictError) as exc:
            stock.delete_transaction(tx.pk)

        assert exc.value.code == 'REVERSAL_WOULD_GO_NEGATIVE'
        assert exc.value.data['transaction_id'] == tx.pk
        assert exc.value.shortfalls[0].available == 2
        assert stock.quantity(main, product) == 2
        assert Transaction.objects.filter(pk=tx.pk).exists()

    def test_delete_twice(self, main, product):
        tx = stock.create_transaction(purchase(main, (product, 1)))
        stock.delete_transaction(tx.pk)

        with pytest.raises(NotFound) as exc:
            stock.delete_transaction(tx.pk)

        assert exc.value.code == 'TRANSACTION_NOT_FOUND'
        assert exc.value.status == 404

    @pytest.mark.parametrize('transaction_id', [999999, 'abc', None])
    def test_delete_unknown(self, transaction_id):
        with pytest.raises(NotFound):
            stock.delete_transaction(transaction_id)

    def test_create_then_delete_is_identity(self, main, overflow, product, other_product, stocked):
        stocked(main, product, 7)
        stocked(main, other_product, 2)
        before = (stock.quantities(main, [product, other_product]),
                  stock.quantities(overflow, [product, other_product]))

        tx = stock.create_transaction(transfer(main, overflow, (product, 7), (other_product, 2)))
        stock.delete_transaction(tx.pk)

        after = (stock.quantities(main, [product, other_product]),
                 stock.quantities(overflow, [product, other_product]))
        assert after == before


class TestReadTransactions:
    """Tests for stock.get_transaction() / list_transactions()."""

    def test_get(self, main, product):
        tx = stock.create_transaction(purchase(main, (product, 1)))

        assert stock.get_transaction(tx.pk) == tx
        assert stock.get_transaction(str(tx.pk)) == tx

    def test_get_unknown(self):
        with pytest.raises(NotFound):
            stock.get_transaction(12345)

    def test_list_newest_first(self, main, product):
        first = stock.create_transaction(purchase(main, (product, 1)))
        second = stock.create_transaction(purchase(main, (product, 1)))

        assert stock.list_transactions() == [second, first]

    def test_list_is_capped(self, main, product, settings):
        settings.STOCKLEDGER = {'TRANSACTION_LIST_LIMIT': 2}
        for _ in range(3):
            stock.create_transaction(purchase(main, (product, 1)))

        assert len(stock.list_transactions()) == 2
        assert len(stock.list_transactions(limit=50)) == 2
        assert len(stock.list_transactions(limit=1)) == 1


class TestTransactionConstraints:
    """Warehouse fields must match the transaction type at the database level."""

    @pytest.mark.parametrize('type_, source, target', [
        ('purchase', 'main', None),
        ('sale', None, 'main'),
        ('transfer', 'main', None),
        ('transfer', 'main', 'main'),
    ])
    def test_invalid_combinations(self, request, type_, source, target):
        fields = {'type': type_}
        if source:
            fields['source_warehouse'] = request.getfixturevalue(source)
        if target:
            fields['target_warehouse'] = request.getfixturevalue(target)

        with pytest.raises(IntegrityError), transaction.atomic():
            Transaction.objects.create(**fields)
