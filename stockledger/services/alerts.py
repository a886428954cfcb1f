"""
Stock alerts — find levels at or below their reorder point.

Usage:
    from stockledger.services.alerts import check_alerts

    # Run periodically (celery beat, cron) or after stock changes
    triggered = check_alerts()
    # Returns list of (StockLevel, min_quantity) tuples
"""

import logging

from stockledger.conf import stockledger_settings
from stockledger.models.stock import StockLevel
from stockledger.services.queries import StockQueries

logger = logging.getLogger('stockledger')


def check_alerts(warehouse=None, using: str | None = None) -> list[tuple[StockLevel, int]]:
    """
    Check every level against its product's reorder point.

    A level triggers when quantity <= product.min_quantity (or
    STOCKLEDGER['DEFAULT_MIN_QUANTITY'] for products without one).

    Args:
        warehouse: Optional warehouse to restrict the check to (None = all).
        using: Database alias (default STOCKLEDGER['DB_ALIAS']).

    Returns:
        List of (level, min_quantity) tuples for triggered levels.
    """
    default_min = stockledger_settings.DEFAULT_MIN_QUANTITY
    triggered = []

    for level in StockQueries.low_stock(warehouse=warehouse, using=using):
        min_quantity = level.product.min_quantity
        if min_quantity is None:
            min_quantity = default_min

        triggered.append((level, min_quantity))
        logger.warning(
            "stock.alert.triggered",
            extra={
                "level_id": level.pk,
                "product_id": level.product_id,
                "warehouse_id": level.warehouse_id,
                "min_quantity": min_quantity,
                "quantity": level.quantity,
            },
        )

    return triggered
