"""
Stock services — modular organization of stock operations.

    from stockledger.services import StockLedger, StockQueries, TransactionProcessor
"""

from stockledger.services.alerts import check_alerts
from stockledger.services.availability import Availability, check_availability
from stockledger.services.ledger import Shortfall, StockLedger
from stockledger.services.queries import StockQueries
from stockledger.services.transactions import TransactionProcessor
from stockledger.services.uow import unit_of_work

__all__ = [
    'Availability',
    'Shortfall',
    'StockLedger',
    'StockQueries',
    'TransactionProcessor',
    'check_alerts',
    'check_availability',
    'unit_of_work',
]
