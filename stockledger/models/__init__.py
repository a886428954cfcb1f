"""
Stockledger Models.

Core models for stock management:
- Warehouse: Where stock exists
- Product / Category / Party: Catalog records (read-only to the engine)
- StockLevel: Quantity cache per (product, warehouse)
- StockMove: Immutable ledger of changes
- Transaction / TransactionItem: Purchases, sales and transfers
"""

from stockledger.models.enums import PartyType, TransactionType
from stockledger.models.move import StockMove
from stockledger.models.party import Party
from stockledger.models.product import Category, Product
from stockledger.models.stock import StockLevel
from stockledger.models.transaction import Transaction, TransactionItem
from stockledger.models.warehouse import Warehouse

__all__ = [
    'TransactionType',
    'PartyType',
    'Category',
    'Product',
    'Warehouse',
    'Party',
    'StockLevel',
    'StockMove',
    'Transaction',
    'TransactionItem',
]
