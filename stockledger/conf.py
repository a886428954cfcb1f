"""
Stockledger configuration.

Usage in settings.py:
    STOCKLEDGER = {
        "TRANSACTION_LIST_LIMIT": 200,
        "DEFAULT_MIN_QUANTITY": 5,
        "DB_ALIAS": "default",
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class StockledgerSettings:
    """Stockledger configuration settings."""

    # Max transactions returned by Stock.list_transactions()
    TRANSACTION_LIST_LIMIT: int = 200

    # Reorder point for products without min_quantity (None = no alert)
    DEFAULT_MIN_QUANTITY: int | None = None

    # Database for every stockledger read and write
    DB_ALIAS: str = "default"


def get_stockledger_settings() -> StockledgerSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STOCKLEDGER", {})
    return StockledgerSettings(**{
        k: v for k, v in user_settings.items()
        if k in StockledgerSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_stockledger_settings(), name)


stockledger_settings = _LazySettings()


def db_alias(using: str | None = None) -> str:
    """Explicit alias, else STOCKLEDGER['DB_ALIAS']."""
    return using or stockledger_settings.DB_ALIAS
