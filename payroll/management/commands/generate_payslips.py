from django.core.management.base import BaseCommand, CommandError

from payroll.engine import Outcome, resolve_period, run_payroll


class Command(BaseCommand):
    help = 'Generate payslips for all eligible employees for a given month'

    def add_arguments(self, parser):
        parser.add_argument('month', nargs='?', type=int, help='Month (1-12), defaults to the current month')
        parser.add_argument('year', nargs='?', type=int, help='Year, defaults to the current year')

    def handle(self, *args, **options):
        try:
            month, year = resolve_period(options.get('month'), options.get('year'))
        except ValueError as e:
            raise CommandError(str(e))

        self.stdout.write(f"Starting Payslip Generation for {month}/{year}...")

        result = run_payroll(month, year)

        for employee_code, outcome in result.outcomes.items():
            if outcome == Outcome.SKIPPED_NO_SALARY:
                self.stdout.write(self.style.WARNING(f"Skipping Employee {employee_code}: No Salary Structure"))
            elif outcome == Outcome.ERRORED:
                self.stderr.write(self.style.ERROR(f"Failed for Employee {employee_code}"))

        self.stdout.write(self.style.SUCCESS(
            f"Completed. Generated: {result.generated}. Errors/Skipped: {result.skipped_or_errored}."
        ))
