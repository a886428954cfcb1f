"""
Availability check — advisory read before a write transaction.

No locks: a concurrent sale can still win between this check and the
write. StockLedger.adjust() re-checks under a row lock; this exists to
fail fast with an itemised list instead of a bare conflict.
"""

from dataclasses import dataclass, field

from stockledger.services.ledger import Shortfall, StockLedger, _pk


@dataclass(frozen=True)
class Availability:
    ok: bool
    shortfalls: list[Shortfall] = field(default_factory=list)


def check_availability(warehouse, items, using: str | None = None) -> Availability:
    """
    Compare requested quantities against what the warehouse holds.

    Args:
        warehouse: Warehouse (or pk) stock would leave from
        items: Line items with .product and .quantity

    Returns:
        Availability(ok, shortfalls). Lines for the same product are
        summed; shortfalls follow the order products first appear in.
    """
    required = {}
    products = {}
    for item in items:
        key = _pk(item.product)
        required[key] = required.get(key, 0) + item.quantity
        products.setdefault(key, item.product)

    on_hand = StockLedger.current_quantities(warehouse, list(products.values()), using=using)

    shortfalls = [
        Shortfall(product=products[key], available=on_hand[key], required=qty)
        for key, qty in required.items()
        if on_hand[key] < qty
    ]
    return Availability(ok=not shortfalls, shortfalls=shortfalls)
