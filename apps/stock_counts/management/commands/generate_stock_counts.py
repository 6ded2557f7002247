# apps/stock_counts/management/commands/generate_stock_counts.py
"""
Management command to generate the day's scheduled stock counts.

Creates one unassigned audit count per active bin of every location whose
count schedule falls on the date. Safe to run more than once a day.

Usage:
    python manage.py generate_stock_counts
    python manage.py generate_stock_counts --date 2026-03-02
"""
from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date

from apps.stock_counts.services import StockCountService


class Command(BaseCommand):
    help = 'Generate unassigned stock counts for locations scheduled today'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            help='Date to generate counts for (YYYY-MM-DD, defaults to today)',
        )

    def handle(self, *args, **options):
        day = None
        if options['date']:
            try:
                day = parse_date(options['date'])
            except ValueError:
                day = None
            if day is None:
                raise CommandError(f"Invalid date: {options['date']}")

        result = StockCountService().generate_scheduled_counts(day)

        self.stdout.write(f"Scheduled counts for {result['date']}")
        for count in result['generated']:
            self.stdout.write(self.style.SUCCESS(f'  Created: {count.stock_count_number} - {count.bin_code}'))
        for error in result['errors']:
            self.stdout.write(self.style.ERROR(f'  Failed: {error}'))

        self.stdout.write(
            self.style.SUCCESS(
                f"\nDone! Created {len(result['generated'])} counts, "
                f"skipped {result['skipped']} already scheduled, {result['empty']} empty bins."
            )
        )
