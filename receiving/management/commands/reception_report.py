import datetime

from django.core.management.base import BaseCommand, CommandError

from receiving.services.errors import ReceptionError
from receiving.services.reception import ReceptionService
from receiving.services.reports import WINDOWS, WINDOW_TODAY


class Command(BaseCommand):
    help = "Print reception KPIs for today or for the whole history."

    def add_arguments(self, parser):
        parser.add_argument('--window', choices=WINDOWS, default=WINDOW_TODAY)
        parser.add_argument('--date', help='Reference day (YYYY-MM-DD), defaults to today')

    def handle(self, *args, **opts):
        today = None
        if opts.get('date'):
            try:
                today = datetime.date.fromisoformat(opts['date'])
            except ValueError:
                raise CommandError(f"Invalid --date '{opts['date']}', expected YYYY-MM-DD.")

        service = ReceptionService()
        try:
            report = service.report(opts['window'], today)
        except ReceptionError as exc:
            raise CommandError(str(exc))

        self.stdout.write(f"Window: {report.window}")
        self.stdout.write(f"Quotas: {report.total_quotas}")
        self.stdout.write(f"Accepted: {report.accepted}")
        self.stdout.write(f"Rejected: {report.rejected}")
        self.stdout.write(f"Efficiency: {report.efficiency_pct}%")
        for row in report.products:
            self.stdout.write(
                f"  {row.code} {row.name}: {row.count} quotas, {row.rejected_count} rejected, "
                f"net {row.net_total:,} kg, avg {row.avg_net:,} kg"
            )
        for row in service.silo_utilization():
            self.stdout.write(
                f"  {row['code']} {row['name']}: {row['stock_kg']:,}/{row['capacity_kg']:,} kg "
                f"({row['utilization_pct']:.1f}%)"
            )
