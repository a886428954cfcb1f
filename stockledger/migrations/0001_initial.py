"""
Initial migration for Stockledger models.
"""

from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    """Create catalog, stock level/move and transaction models."""

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True, verbose_name='Name')),
                ('description', models.TextField(blank=True, default='', verbose_name='Description')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Category',
                'verbose_name_plural': 'Categories',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Party',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('supplier', 'Supplier'), ('customer', 'Customer')], db_index=True, max_length=20, verbose_name='Type')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('email', models.EmailField(blank=True, default='', max_length=254, verbose_name='Email')),
                ('phone', models.CharField(blank=True, default='', max_length=40, verbose_name='Phone')),
                ('address', models.TextField(blank=True, default='', verbose_name='Address')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Party',
                'verbose_name_plural': 'Parties',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Warehouse',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, verbose_name='Name')),
                ('location', models.CharField(blank=True, default='', max_length=255, verbose_name='Location')),
                ('code', models.SlugField(blank=True, help_text='Optional short identifier (e.g. main, overflow)', null=True, unique=True, verbose_name='Code')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Warehouse',
                'verbose_name_plural': 'Warehouses',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('sku', models.CharField(max_length=64, unique=True, verbose_name='SKU')),
                ('barcode', models.CharField(blank=True, default='', max_length=64, verbose_name='Barcode')),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='Price')),
                ('min_quantity', models.PositiveIntegerField(blank=True, help_text='Reorder point. Empty = use STOCKLEDGER["DEFAULT_MIN_QUANTITY"].', null=True, verbose_name='Minimum quantity')),
                ('expiration_date', models.DateField(blank=True, null=True, verbose_name='Expiration date')),
                ('description', models.TextField(blank=True, default='', verbose_name='Description')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='products', to='stockledger.category', verbose_name='Category')),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='StockLevel',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.IntegerField(default=0, verbose_name='Quantity')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_levels', to='stockledger.product', verbose_name='Product')),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_levels', to='stockledger.warehouse', verbose_name='Warehouse')),
            ],
            options={
                'verbose_name': 'Stock level',
                'verbose_name_plural': 'Stock levels',
                'indexes': [models.Index(fields=['warehouse', 'product'], name='stockledger_level_wh_idx')],
                'constraints': [
                    models.UniqueConstraint(fields=('product', 'warehouse'), name='unique_stock_level'),
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 0)), name='stock_level_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockMove',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('delta', models.IntegerField(help_text='Positive = in, negative = out', verbose_name='Delta')),
                ('reference', models.CharField(blank=True, db_index=True, default='', help_text='E.g. "tx:42"', max_length=64, verbose_name='Reference')),
                ('reason', models.CharField(help_text='Required. E.g. "purchase", "reversal of sale"', max_length=255, verbose_name='Reason')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Timestamp')),
                ('level', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='moves', to='stockledger.stocklevel', verbose_name='Stock level')),
            ],
            options={
                'verbose_name': 'Stock move',
                'verbose_name_plural': 'Stock moves',
                'ordering': ['timestamp', 'pk'],
                'indexes': [models.Index(fields=['level', 'timestamp'], name='stockledger_move_level_idx')],
            },
        ),
        migrations.CreateModel(
            name='Transaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('purchase', 'Purchase'), ('sale', 'Sale'), ('transfer', 'Transfer')], db_index=True, max_length=20, verbose_name='Type')),
                ('date', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Date')),
                ('notes', models.TextField(blank=True, default='', verbose_name='Notes')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('party', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='transactions', to='stockledger.party', verbose_name='Party')),
                ('source_warehouse', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='outgoing_transactions', to='stockledger.warehouse', verbose_name='Source warehouse')),
                ('target_warehouse', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='incoming_transactions', to='stockledger.warehouse', verbose_name='Target warehouse')),
            ],
            options={
                'verbose_name': 'Transaction',
                'verbose_name_plural': 'Transactions',
                'ordering': ['-created_at', '-pk'],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(('source_warehouse__isnull', True), ('target_warehouse__isnull', False), ('type', 'purchase')),
                            models.Q(('source_warehouse__isnull', False), ('target_warehouse__isnull', True), ('type', 'sale')),
                            models.Q(
                                ('source_warehouse__isnull', False),
                                ('target_warehouse__isnull', False),
                                ('type', 'transfer'),
                                models.Q(('source_warehouse', models.F('target_warehouse')), _negated=True),
                            ),
                            _connector='OR',
                        ),
                        name='transaction_warehouses_match_type',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='TransactionItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('line', models.PositiveIntegerField(verbose_name='Line')),
                ('quantity', models.PositiveIntegerField(verbose_name='Quantity')),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))], verbose_name='Unit price')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transaction_items', to='stockledger.product', verbose_name='Product')),
                ('transaction', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='stockledger.transaction', verbose_name='Transaction')),
            ],
            options={
                'verbose_name': 'Transaction item',
                'verbose_name_plural': 'Transaction items',
                'ordering': ['line'],
                'constraints': [
                    models.UniqueConstraint(fields=('transaction', 'line'), name='unique_transaction_line'),
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 1)), name='transaction_item_quantity_positive'),
                ],
            },
        ),
    ]
