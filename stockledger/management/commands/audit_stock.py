"""
Management command to audit cached stock quantities against the ledger.

Usage:
    python manage.py audit_stock
    python manage.py audit_stock --fix
"""

from django.core.management.base import BaseCommand
from django.db.models import Sum
from django.db.models.functions import Coalesce

from stockledger.conf import db_alias
from stockledger.models import StockLevel


class Command(BaseCommand):
    """Compare StockLevel.quantity with the sum of its moves."""

    help = 'Compares cached stock quantities with the sum of ledger moves'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Recalculate drifted levels from their moves'
        )

    def handle(self, *args, **options):
        levels = (
            StockLevel.objects.using(db_alias())
            .select_related('product', 'warehouse')
            .annotate(ledger_total=Coalesce(Sum('moves__delta'), 0))
            .order_by('warehouse__name', 'product__name')
        )

        drifted = 0
        for level in levels:
            if level.quantity == level.ledger_total:
                continue
            drifted += 1
            self.stdout.write(
                f'{level.product} @ {level.warehouse}: '
                f'cached {level.quantity}, ledger {level.ledger_total}'
            )
            if options['fix']:
                level.recalculate()

        if not drifted:
            self.stdout.write(self.style.SUCCESS('All stock levels match the ledger'))
        elif options['fix']:
            self.stdout.write(self.style.SUCCESS(f'{drifted} level(s) recalculated'))
        else:
            self.stdout.write(self.style.WARNING(f'{drifted} level(s) drifted; run with --fix'))
