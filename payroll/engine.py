"""
Monthly payslip generation.

Payroll uses a fixed 30-day month. An employee who joins during the
target month is paid for 30 - day_of_joining + 1 days (clamped to 0..30);
everyone else is paid for the full 30.

Rounding is not uniform: salary components, PF and totals are rounded
half-up to 2 decimals, while ESIC is rounded up to a whole currency unit.
ESIC eligibility is tested on the un-prorated monthly gross, but the
deduction is taken from the prorated (earned) gross.
"""

import calendar
import datetime
import enum
import logging
from dataclasses import asdict, dataclass, field
from decimal import Decimal, ROUND_CEILING, ROUND_HALF_UP

from django.db import IntegrityError, transaction
from django.utils import timezone

from employees.models import Employee
from .models import Payslip, SalaryStructure
from .policy import load_policy_snapshot

logger = logging.getLogger(__name__)

PAYROLL_MONTH_DAYS = 30
PF_RATE = Decimal('0.12')
ESIC_RATE = Decimal('0.0075')
ESIC_WAGE_CEILING = Decimal('21000')

TWO_PLACES = Decimal('0.01')
WHOLE_UNIT = Decimal('1')
ZERO = Decimal('0.00')


class Outcome(enum.Enum):
    GENERATED = 'generated'
    SKIPPED_NO_ACCOUNT = 'skipped_no_account'
    SKIPPED_NO_SALARY = 'skipped_no_salary'
    SKIPPED_ALREADY_EXISTS = 'skipped_already_exists'
    SKIPPED_NOT_YET_JOINED = 'skipped_not_yet_joined'
    ERRORED = 'errored'

    @property
    def is_skip(self):
        return self.name.startswith('SKIPPED_')


def to_money(value):
    """Round half-up to 2 decimal places."""
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def ceil_money(value):
    """Round up to a whole currency unit."""
    return Decimal(str(value)).quantize(WHOLE_UNIT, rounding=ROUND_CEILING)


def month_end(month, year):
    return datetime.date(year, month, calendar.monthrange(year, month)[1])


def has_joined_by(date_of_joining, month, year):
    """False when the employee joins after the last calendar day of the month."""
    if date_of_joining is None:
        return True
    return date_of_joining <= month_end(month, year)


def payable_days(date_of_joining, month, year):
    days = PAYROLL_MONTH_DAYS
    if date_of_joining is not None and (date_of_joining.year, date_of_joining.month) == (year, month):
        day_of_joining = min(date_of_joining.day, PAYROLL_MONTH_DAYS)
        days = PAYROLL_MONTH_DAYS - day_of_joining + 1
    return max(0, min(PAYROLL_MONTH_DAYS, days))


@dataclass(frozen=True)
class PayslipComputation:
    days_worked: int
    basic: Decimal
    hra: Decimal
    da: Decimal
    allowances: Decimal
    gross_salary: Decimal
    pf: Decimal
    esic: Decimal
    ptax: Decimal
    total_earnings: Decimal
    total_deductions: Decimal
    net_pay: Decimal

    def as_fields(self):
        return asdict(self)


def _prorate(amount, days):
    return to_money(Decimal(str(amount or 0)) * days / PAYROLL_MONTH_DAYS)


def compute_payslip(employee, structure, month, year, policy):
    """
    Compute a prorated payslip without touching the database.

    ``structure`` only needs basic, hra, da, allowances and gross_salary;
    ``policy`` is a PayrollPolicySnapshot.
    """
    days = payable_days(employee.date_of_joining, month, year)

    basic = _prorate(structure.basic, days)
    hra = _prorate(structure.hra, days)
    da = _prorate(structure.da, days)
    allowances = _prorate(structure.allowances, days)
    earned_gross = basic + hra + da + allowances

    pf = ZERO
    if not employee.pf_opt_out and policy.pf_enabled:
        pf = to_money(basic * PF_RATE)

    esic = ZERO
    if not employee.esic_opt_out and policy.esic_enabled:
        monthly_gross = Decimal(str(structure.gross_salary or 0))
        if monthly_gross <= ESIC_WAGE_CEILING:
            esic = ceil_money(earned_gross * ESIC_RATE)

    ptax = ZERO
    if not employee.ptax_opt_out and policy.ptax_enabled:
        slab = policy.find_ptax_slab(earned_gross)
        if slab is not None:
            ptax = to_money(slab.tax_amount)

    total_deductions = pf + esic + ptax
    return PayslipComputation(
        days_worked=days,
        basic=basic,
        hra=hra,
        da=da,
        allowances=allowances,
        gross_salary=earned_gross,
        pf=pf,
        esic=esic,
        ptax=ptax,
        total_earnings=earned_gross,
        total_deductions=total_deductions,
        net_pay=earned_gross - total_deductions,
    )


@dataclass
class GenerationResult:
    outcome: Outcome
    payslip: Payslip = None


def current_salary_structure(employee):
    return SalaryStructure.objects.filter(employee=employee).first()


def generate_payslip(employee, month, year, policy, now=None):
    """
    Generate and store one employee's payslip for the period.

    Skips are returned as outcomes, never raised. Unexpected errors
    propagate to the caller; nothing is stored in that case.
    """
    if not employee.has_active_account:
        return GenerationResult(Outcome.SKIPPED_NO_ACCOUNT)

    structure = current_salary_structure(employee)
    if structure is None:
        logger.warning("Skipping Employee %s: No Salary Structure", employee.employee_code)
        return GenerationResult(Outcome.SKIPPED_NO_SALARY)

    if Payslip.objects.filter(employee=employee, month=month, year=year).exists():
        return GenerationResult(Outcome.SKIPPED_ALREADY_EXISTS)

    if not has_joined_by(employee.date_of_joining, month, year):
        return GenerationResult(Outcome.SKIPPED_NOT_YET_JOINED)

    computed = compute_payslip(employee, structure, month, year, policy)

    try:
        with transaction.atomic():
            payslip = Payslip.objects.create(
                employee=employee,
                month=month,
                year=year,
                generated_on=now or timezone.now(),
                **computed.as_fields()
            )
    except IntegrityError:
        # A concurrent run inserted the same (employee, month, year) first
        logger.info("Payslip for %s %s/%s created concurrently", employee.employee_code, month, year)
        return GenerationResult(Outcome.SKIPPED_ALREADY_EXISTS)

    return GenerationResult(Outcome.GENERATED, payslip)


@dataclass
class PayrollRunResult:
    month: int
    year: int
    outcomes: dict = field(default_factory=dict)

    def record(self, employee, outcome):
        self.outcomes[employee.employee_code] = outcome

    def count(self, *outcomes):
        return sum(1 for outcome in self.outcomes.values() if outcome in outcomes)

    @property
    def generated(self):
        return self.count(Outcome.GENERATED)

    @property
    def errors(self):
        # Missing salary structures are data errors for operators
        return self.count(Outcome.ERRORED, Outcome.SKIPPED_NO_SALARY)

    @property
    def skipped(self):
        return self.count(
            Outcome.SKIPPED_NO_ACCOUNT,
            Outcome.SKIPPED_ALREADY_EXISTS,
            Outcome.SKIPPED_NOT_YET_JOINED,
        )

    @property
    def skipped_or_errored(self):
        return len(self.outcomes) - self.generated

    def summary(self):
        return {
            'month': self.month,
            'year': self.year,
            'generated': self.generated,
            'skipped': self.skipped,
            'errors': self.errors,
            'skipped_or_errored': self.skipped_or_errored,
        }


def resolve_period(month=None, year=None):
    """Default to the current month/year and validate the period."""
    today = timezone.localdate()
    month = int(month) if month is not None else today.month
    year = int(year) if year is not None else today.year
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    if not 2000 <= year <= 2100:
        raise ValueError(f"Invalid year: {year}")
    return month, year


def run_payroll(month=None, year=None, employees=None, now=None):
    """
    Generate payslips for every employee for the period.

    Loading the policy or the employee set is fatal and aborts the run.
    A failure for one employee is logged and counted, and the run moves on.
    """
    month, year = resolve_period(month, year)
    policy = load_policy_snapshot()
    if employees is None:
        employees = Employee.objects.select_related('user').order_by('id')
    employees = list(employees)

    result = PayrollRunResult(month=month, year=year)
    logger.info("Starting payslip generation for %s/%s (%s employees)", month, year, len(employees))

    for employee in employees:
        try:
            with transaction.atomic():
                outcome = generate_payslip(employee, month, year, policy, now=now).outcome
        except Exception as e:
            logger.exception("Failed for Employee %s: %s", employee.employee_code, e)
            outcome = Outcome.ERRORED

        result.record(employee, outcome)
        logger.info("Employee %s: %s", employee.employee_code, outcome.value)

    logger.info(
        "Completed %s/%s. Generated: %s. Errors/Skipped: %s.",
        month, year, result.generated, result.skipped_or_errored
    )
    return result
