"""
Management command to list stock levels at or below their reorder point.

Usage:
    python manage.py check_stock_alerts
    python manage.py check_stock_alerts --warehouse 3
"""

from django.core.management.base import BaseCommand, CommandError

from stockledger import stock
from stockledger.conf import db_alias
from stockledger.models import Warehouse


class Command(BaseCommand):
    """Run stock alerts command."""

    help = 'Lists stock levels at or below their reorder point'

    def add_arguments(self, parser):
        parser.add_argument(
            '--warehouse',
            type=int,
            help='Only check this warehouse (primary key)'
        )

    def handle(self, *args, **options):
        warehouse = None
        if options['warehouse'] is not None:
            warehouse = Warehouse.objects.using(db_alias()).filter(pk=options['warehouse']).first()
            if warehouse is None:
                raise CommandError(f'Warehouse {options["warehouse"]} does not exist')

        triggered = stock.check_alerts(warehouse=warehouse)

        for level, min_quantity in triggered:
            self.stdout.write(
                f'{level.product} @ {level.warehouse}: {level.quantity} (min {min_quantity})'
            )

        if triggered:
            self.stdout.write(self.style.WARNING(f'{len(triggered)} alert(s) triggered'))
        else:
            self.stdout.write(self.style.SUCCESS('No stock alerts'))
