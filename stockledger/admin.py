"""
Stockledger Admin — basic django.contrib.admin registrations.

- Warehouse, Category, Product, Party: list + edit
- StockLevel: read-only (quantity, low-stock flag)
- StockMove: read-only audit trail (timestamp, delta, reason, reference)
- Transaction: read-only with items inline

Stock only changes through the stock service, never through the admin.
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from stockledger.conf import stockledger_settings
from stockledger.models import (
    Category,
    Party,
    Product,
    StockLevel,
    StockMove,
    Transaction,
    TransactionItem,
    Warehouse,
)


class ReadOnlyAdminMixin:
    """No add/change/delete; records are written by the stock service."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =========================================================================
# CATALOG ADMIN
# =========================================================================

@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    """Warehouse admin — editable."""

    list_display = ['name', 'code', 'location']
    search_fields = ['name', 'code', 'location']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name']
    search_fields = ['name']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Product admin — editable."""

    list_display = ['name', 'sku', 'category', 'price', 'min_quantity']
    list_filter = ['category']
    search_fields = ['name', 'sku', 'barcode']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(Party)
class PartyAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'email', 'phone']
    list_filter = ['type']
    search_fields = ['name', 'email']
    readonly_fields = ['created_at', 'updated_at']


# =========================================================================
# STOCK LEVEL ADMIN (read-only)
# =========================================================================

@admin.register(StockLevel)
class StockLevelAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """StockLevel admin — read-only. Stock only changes via Stock service."""

    list_display = ['product', 'warehouse', 'quantity', 'low_stock_display', 'updated_at']
    list_filter = ['warehouse']
    search_fields = ['product__name', 'product__sku']
    readonly_fields = ['product', 'warehouse', 'quantity', 'created_at', 'updated_at']
    ordering = ['warehouse__name', 'product__name']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('product', 'warehouse').with_low_stock_flag(
            stockledger_settings.DEFAULT_MIN_QUANTITY
        )

    @admin.display(description=_('Low stock'), boolean=True, ordering='is_low_stock')
    def low_stock_display(self, obj):
        return obj.is_low_stock


# =========================================================================
# MOVE ADMIN (read-only audit trail)
# =========================================================================

@admin.register(StockMove)
class StockMoveAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """StockMove admin — read-only. Immutable audit trail."""

    list_display = ['timestamp', 'level', 'delta', 'reason', 'reference']
    list_filter = ['timestamp', 'level__warehouse']
    search_fields = ['reason', 'reference']
    readonly_fields = ['level', 'delta', 'reason', 'reference', 'timestamp']
    date_hierarchy = 'timestamp'


# =========================================================================
# TRANSACTION ADMIN (read-only)
# =========================================================================

class TransactionItemInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = TransactionItem
    extra = 0
    fields = ['line', 'product', 'quantity', 'price']
    readonly_fields = fields


@admin.register(Transaction)
class TransactionAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """Transaction admin — read-only. Create/delete go through the Stock service."""

    list_display = ['id', 'type', 'date', 'party', 'source_warehouse', 'target_warehouse', 'created_at']
    list_filter = ['type', 'source_warehouse', 'target_warehouse']
    search_fields = ['notes', 'party__name']
    readonly_fields = ['type', 'date', 'party', 'source_warehouse', 'target_warehouse',
                       'notes', 'created_at']
    date_hierarchy = 'date'
    inlines = [TransactionItemInline]
