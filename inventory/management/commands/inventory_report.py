from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from django.utils.dateparse import parse_date
from inventory import reports, selectors


class Command(BaseCommand):
    help = "Print ledger totals per movement kind and the most moved products for a date window."

    def add_arguments(self, parser):
        parser.add_argument("--start", help="First day (YYYY-MM-DD), defaults to 30 days ago")
        parser.add_argument("--end", help="Last day (YYYY-MM-DD), defaults to today")
        parser.add_argument("--product", type=int, help="Restrict to one product id")
        parser.add_argument("--top", type=int, default=5, help="Number of top products to list")

    def _day(self, value, fallback):
        if not value:
            return fallback
        parsed = parse_date(value)
        if parsed is None:
            raise CommandError(f"Invalid date: {value}")
        return parsed

    def handle(self, *args, **options):
        today = timezone.localdate()
        start = self._day(options.get("start"), today - timedelta(days=30))
        end = self._day(options.get("end"), today)
        if end < start:
            raise CommandError("--end must not be before --start")

        entries = list(selectors.entries_between(start, end, product_id=options.get("product")))
        summary = reports.summarize(entries)

        self.stdout.write(f"Ledger report {start} .. {end}")
        for kind, row in summary["by_kind"].items():
            self.stdout.write(
                f"  {kind:<11} count={row['count']:<5} signed={row['signed_total']:.2f} units={row['units']:.2f}"
            )
        for row in reports.top_entities(entries, by=reports.TOP_BY_PRODUCT, limit=options["top"]):
            self.stdout.write(
                f"  #{row['id']} {row['label']}: {row['total_movements']} movements, "
                f"{row['total_quantity']:.2f} units"
            )
        self.stdout.write(self.style.SUCCESS(f"Total movements: {summary['total_movements']}"))
