"""
Stock Service — The single public interface for all stock operations.

Usage:
    from stockledger import stock, StockError

    stock.create_transaction({'type': 'purchase', 'target_warehouse': main.pk,
                              'items': [{'product': bolt.pk, 'quantity': 50, 'price': '0.10'}]})
    stock.quantity(main, bolt)  # 50
"""

from collections.abc import Mapping

from stockledger.services.alerts import check_alerts
from stockledger.services.availability import Availability, check_availability
from stockledger.services.ledger import StockLedger
from stockledger.services.queries import StockQueries
from stockledger.services.transactions import TransactionProcessor
from stockledger.variants import LineItem


class Stock:
    """
    Single interface for all stock operations.

    Parameter convention: (warehouse, product, ...). References are model
    instances or primary keys.

    IMPORTANT: State-changing methods run in one atomic unit of work and
    lock the stock levels they touch. See TransactionProcessor.
    """

    # ══════════════════════════════════════════════════════════════
    # CORE: QUERIES
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def quantity(cls, warehouse, product) -> int:
        """Quantity on hand (0 when the pair was never stocked)."""
        return StockLedger.current_quantity(warehouse, product)

    @classmethod
    def quantities(cls, warehouse, products) -> dict:
        """{product_pk: quantity} for one warehouse."""
        return StockLedger.current_quantities(warehouse, products)

    @classmethod
    def total(cls, product) -> int:
        return StockQueries.total(product)

    @classmethod
    def available(cls, warehouse, items) -> Availability:
        """
        Advisory availability check.

        Args:
            warehouse: Warehouse stock would leave from
            items: [{product, quantity}] mappings or LineItem objects

        Returns:
            Availability(ok, shortfalls)
        """
        lines = [
            LineItem(product=item['product'], quantity=item['quantity'], price=None)
            if isinstance(item, Mapping) else item
            for item in items
        ]
        return check_availability(warehouse, lines)

    @classmethod
    def levels(cls, warehouse=None, product=None, include_empty: bool = True):
        return StockQueries.levels(warehouse=warehouse, product=product, include_empty=include_empty)

    @classmethod
    def low_stock(cls, warehouse=None):
        return StockQueries.low_stock(warehouse=warehouse)

    @classmethod
    def moves(cls, warehouse=None, product=None, reference: str | None = None):
        return StockQueries.moves(warehouse=warehouse, product=product, reference=reference)

    # ══════════════════════════════════════════════════════════════
    # CORE: TRANSACTIONS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def create_transaction(cls, payload, enrich: bool = False):
        """Create a purchase, sale or transfer. See TransactionProcessor.create."""
        return TransactionProcessor.create(payload, enrich=enrich)

    @classmethod
    def delete_transaction(cls, transaction_id, enrich: bool = False) -> dict:
        """Reverse and delete a transaction. See TransactionProcessor.delete."""
        return TransactionProcessor.delete(transaction_id, enrich=enrich)

    @classmethod
    def get_transaction(cls, transaction_id):
        return TransactionProcessor.get(transaction_id)

    @classmethod
    def list_transactions(cls, limit: int | None = None):
        return TransactionProcessor.list(limit=limit)

    # ══════════════════════════════════════════════════════════════
    # EXTENSION: ALERTS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def check_alerts(cls, warehouse=None):
        """Levels at or below their reorder point, as (level, min_quantity)."""
        return check_alerts(warehouse=warehouse)
