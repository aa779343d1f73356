"""
Holiday resolution and leave day counting.

Sunday is the weekly off-day. A day that is both a Sunday and a holiday
is skipped as a Sunday and never counted as a holiday.
"""

import datetime
import logging
from typing import NamedTuple

from .models import Holiday

logger = logging.getLogger(__name__)

WEEKLY_OFF_DAY = 6  # Sunday (date.weekday())


class LeaveDayCount(NamedTuple):
    working_days: int
    holiday_days: int


def resolve_holiday(day, employee, holidays=None):
    """
    Return the holiday covering ``day`` for ``employee``, or None.

    When ``holidays`` is given the match is made against those rows only,
    otherwise the database is queried.
    """
    if holidays is None:
        return (
            Holiday.objects.for_employee(employee)
            .filter(start_date__lte=day, end_date__gte=day)
            .first()
        )

    for holiday in holidays:
        if holiday.covers(day) and holiday.applies_to(employee):
            return holiday
    return None


def is_weekly_off(day):
    return day.weekday() == WEEKLY_OFF_DAY


def count_working_days(start_date, end_date, employee):
    """Count chargeable leave days between two dates, both inclusive."""
    if start_date > end_date:
        return LeaveDayCount(0, 0)

    holidays = list(
        Holiday.objects.for_employee(employee).overlapping(start_date, end_date)
    )

    working_days = 0
    holiday_days = 0
    current = start_date
    while current <= end_date:
        if is_weekly_off(current):
            pass
        elif resolve_holiday(current, employee, holidays) is not None:
            holiday_days += 1
        else:
            working_days += 1
        current += datetime.timedelta(days=1)

    logger.debug(
        "Counted %s working / %s holiday days for %s between %s and %s",
        working_days, holiday_days, employee.employee_code, start_date, end_date
    )
    return LeaveDayCount(working_days, holiday_days)
