"""
Payroll models: salary structures, global policy settings and payslips.
"""

from decimal import Decimal

from django.db import models
from employees.models import Employee

ZERO = Decimal('0.00')


class SalaryComponents(models.Model):
    """Monthly salary components shared by the current structure and its history."""
    basic = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    hra = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    da = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    allowances = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    deductions = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    gross_salary = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    effective_from = models.DateField(null=True, blank=True)

    class Meta:
        abstract = True

    def compute_gross(self):
        return self.basic + self.hra + self.da + self.allowances


class SalaryStructure(SalaryComponents):
    """Current monthly salary structure. One per employee."""
    employee = models.OneToOneField(
        Employee,
        on_delete=models.CASCADE,
        related_name='salary_structure'
    )

    # Audit timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.employee.name}: {self.gross_salary}/month"


class SalaryHistory(SalaryComponents):
    """Previous salary structures, archived whenever the current one is replaced."""
    employee = models.ForeignKey(
        Employee,
        on_delete=models.CASCADE,
        related_name='salary_history'
    )
    archived_on = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-archived_on']
        verbose_name_plural = 'Salary Histories'

    def __str__(self):
        return f"{self.employee.name}: {self.gross_salary} (archived {self.archived_on:%Y-%m-%d})"


class PayrollPolicy(models.Model):
    """Global payroll setting stored as key/value text (toggles, percentages, PTAX slabs as JSON)."""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField(null=True, blank=True)
    description = models.CharField(max_length=255, null=True, blank=True)

    # Audit timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['key']
        verbose_name_plural = 'Payroll Policies'

    def __str__(self):
        return f"{self.key} = {self.value}"


class Payslip(models.Model):
    """
    Monthly payslip for an employee.
    Exactly one per (employee, month, year); rows are never recomputed.
    """
    employee = models.ForeignKey(
        Employee,
        on_delete=models.CASCADE,
        related_name='payslips'
    )
    month = models.IntegerField(help_text="1-12")
    year = models.IntegerField()
    days_worked = models.PositiveSmallIntegerField(default=0, help_text="Payable days out of 30")

    # Earnings
    basic = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    hra = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    da = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    allowances = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    gross_salary = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)

    # Deductions
    pf = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    esic = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    ptax = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)

    # Totals
    total_earnings = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    total_deductions = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    net_pay = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    generated_on = models.DateTimeField()

    class Meta:
        ordering = ['-year', '-month', 'employee__name']
        constraints = [
            models.UniqueConstraint(
                fields=['employee', 'month', 'year'],
                name='unique_payslip_per_employee_period'
            ),
        ]

    def __str__(self):
        return f"{self.employee.name} {self.year}/{self.month}: {self.net_pay}"
