"""
Employees views package.

- utils.py: Shared helpers and decorators
- holidays.py: Holiday calendar management and Excel import
- leave_management.py: Leave day counting, leave requests and approval
"""

# Import all views for urls.py
from .utils import superuser_required, parse_iso_date, read_json_body
from .holidays import (
    holiday_list,
    create_holiday,
    update_holiday,
    delete_holiday,
    upload_holidays
)
from .leave_management import (
    leave_days_preview,
    leave_management,
    submit_leave_request,
    approve_leave as approve_leave_request,
    reject_leave as reject_leave_request
)

__all__ = [
    # Utils
    'superuser_required',
    'parse_iso_date',
    'read_json_body',
    # Holidays
    'holiday_list',
    'create_holiday',
    'update_holiday',
    'delete_holiday',
    'upload_holidays',
    # Leave Management
    'leave_days_preview',
    'leave_management',
    'submit_leave_request',
    'approve_leave_request',
    'reject_leave_request',
]
