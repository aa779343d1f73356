"""
Factories shared by the employees and payroll test suites.
"""

import datetime
from decimal import Decimal

from django.contrib.auth import get_user_model

from employees.models import Department, Employee


def make_user(username, is_active=True, is_superuser=False):
    User = get_user_model()
    user = User.objects.create_user(username=username, password='pass', is_active=is_active)
    if is_superuser:
        user.is_superuser = True
        user.is_staff = True
        user.save()
    return user


def make_admin(username='admin'):
    return make_user(username, is_superuser=True)


def make_department(name='Engineering'):
    return Department.objects.get_or_create(name=name)[0]


def make_employee(code='E001', name=None, with_account=True, is_active=True, **fields):
    user = make_user(f'user-{code}', is_active=is_active) if with_account else None
    fields.setdefault('date_of_joining', datetime.date(2023, 1, 1))
    return Employee.objects.create(
        user=user,
        employee_code=code,
        name=name or f'Employee {code}',
        **fields
    )


def make_salary(employee, basic, hra=0, da=0, allowances=0):
    from payroll.models import SalaryStructure

    structure = SalaryStructure(
        employee=employee,
        basic=Decimal(str(basic)),
        hra=Decimal(str(hra)),
        da=Decimal(str(da)),
        allowances=Decimal(str(allowances)),
    )
    structure.gross_salary = structure.compute_gross()
    structure.save()
    return structure
