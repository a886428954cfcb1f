"""
Django Stockledger — multi-warehouse stock transactions.

Purchases, sales and transfers move stock between warehouses through a
single ledger that never lets a quantity go negative.

Usage:
    from stockledger import stock, StockError

    tx = stock.create_transaction({
        'type': 'sale',
        'source_warehouse': main.pk,
        'items': [{'product': widget.pk, 'quantity': 3, 'price': '9.90'}],
    })
    stock.quantity(main, widget)  # 7
    stock.delete_transaction(tx.pk)
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'stock':
        from stockledger.service import Stock
        return Stock
    elif name in ('StockError', 'ValidationError', 'InsufficientStock',
                  'NotFound', 'ConflictError', 'StoreUnavailable'):
        from stockledger import exceptions
        return getattr(exceptions, name)
    elif name == 'Warehouse':
        from stockledger.models.warehouse import Warehouse
        return Warehouse
    elif name == 'Product':
        from stockledger.models.product import Product
        return Product
    elif name == 'Party':
        from stockledger.models.party import Party
        return Party
    elif name == 'StockLevel':
        from stockledger.models.stock import StockLevel
        return StockLevel
    elif name == 'StockMove':
        from stockledger.models.move import StockMove
        return StockMove
    elif name == 'Transaction':
        from stockledger.models.transaction import Transaction
        return Transaction
    elif name == 'TransactionType':
        from stockledger.models.enums import TransactionType
        return TransactionType
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'stock',
    'StockError',
    'ValidationError',
    'InsufficientStock',
    'NotFound',
    'ConflictError',
    'StoreUnavailable',
    'Warehouse',
    'Product',
    'Party',
    'StockLevel',
    'StockMove',
    'Transaction',
    'TransactionType',
]

__version__ = '0.1.0'
