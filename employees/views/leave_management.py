"""
Leave management views.
Handles leave day counting, leave submission, approval, and rejection.
"""

import logging
from django.db import transaction
from django.db.models import F
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_http_methods
from django.contrib.auth.decorators import login_required, user_passes_test

from ..models import Employee, LeaveBalance, LeaveRequest, LeaveType
from ..services import count_working_days
from .utils import superuser_required, parse_iso_date, read_json_body

logger = logging.getLogger(__name__)


def serialize_leave_request(leave_request):
    return {
        'id': leave_request.id,
        'employee_id': leave_request.employee_id,
        'employee_name': leave_request.employee.name,
        'leave_type': leave_request.leave_type.code if leave_request.leave_type else None,
        'start_date': leave_request.start_date.strftime('%Y-%m-%d'),
        'end_date': leave_request.end_date.strftime('%Y-%m-%d'),
        'requested_days': leave_request.requested_days,
        'holiday_days': leave_request.holiday_days,
        'approved_days': leave_request.approved_days,
        'status': leave_request.status,
        'reason': leave_request.reason,
        'admin_notes': leave_request.admin_notes,
    }


@login_required
def leave_days_preview(request):
    """Count working days and holidays an employee would be charged for a date range."""
    try:
        employee = Employee.objects.get(id=request.GET.get('employee_id'))
        start_date = parse_iso_date(request.GET.get('start_date'))
        end_date = parse_iso_date(request.GET.get('end_date'))
    except (Employee.DoesNotExist, ValueError):
        return JsonResponse({'success': False, 'error': 'Valid employee_id, start_date and end_date are required'}, status=400)

    if start_date > end_date:
        return JsonResponse({'success': False, 'error': 'Start date cannot be after end date'}, status=400)

    counted = count_working_days(start_date, end_date, employee)
    return JsonResponse({
        'success': True,
        'working_days': counted.working_days,
        'holiday_days': counted.holiday_days,
    })


@login_required
@user_passes_test(superuser_required)
def leave_management(request):
    """List leave requests, filtered by status."""
    status_filter = request.GET.get('status', 'pending')

    if status_filter == 'all':
        leave_requests = LeaveRequest.objects.all().select_related('employee', 'leave_type')
    else:
        leave_requests = LeaveRequest.objects.filter(status=status_filter).select_related('employee', 'leave_type')

    return JsonResponse({
        'success': True,
        'status_filter': status_filter,
        'leave_requests': [serialize_leave_request(lr) for lr in leave_requests],
        'pending_count': LeaveRequest.objects.filter(status='pending').count(),
        'approved_count': LeaveRequest.objects.filter(status='approved').count(),
        'rejected_count': LeaveRequest.objects.filter(status='rejected').count(),
    })


@login_required
@require_http_methods(["POST"])
def submit_leave_request(request):
    """Submit a leave request; requested days exclude Sundays and holidays."""
    try:
        data = read_json_body(request)
        employee = Employee.objects.get(id=data.get('employee_id'))
        start_date = parse_iso_date(data.get('start_date'))
        end_date = parse_iso_date(data.get('end_date'))
        leave_type = None
        if data.get('leave_type_id'):
            leave_type = LeaveType.objects.get(id=data['leave_type_id'])
    except Employee.DoesNotExist:
        return JsonResponse({'success': False, 'error': 'Employee not found'}, status=404)
    except LeaveType.DoesNotExist:
        return JsonResponse({'success': False, 'error': 'Leave type not found'}, status=404)
    except ValueError as e:
        return JsonResponse({'success': False, 'error': f'Invalid data format: {str(e)}'}, status=400)

    if start_date > end_date:
        return JsonResponse({'success': False, 'error': 'Start date cannot be after end date'}, status=400)

    counted = count_working_days(start_date, end_date, employee)
    if counted.working_days == 0:
        return JsonResponse({'success': False, 'error': 'Selected dates contain no working days'}, status=400)

    if leave_type is not None:
        balance = LeaveBalance.objects.filter(employee=employee, leave_type=leave_type).first()
        if balance is not None and balance.remaining_days < counted.working_days:
            return JsonResponse({
                'success': False,
                'error': f'Insufficient balance: {balance.remaining_days} day(s) remaining'
            }, status=400)

    leave_request = LeaveRequest.objects.create(
        employee=employee,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        reason=(data.get('reason') or '').strip(),
        requested_days=counted.working_days,
        holiday_days=counted.holiday_days,
    )

    return JsonResponse({
        'success': True,
        'message': f'Leave requested for {counted.working_days} day(s)',
        'leave_request': serialize_leave_request(leave_request)
    }, status=201)


@login_required
@user_passes_test(superuser_required)
@require_http_methods(["POST"])
def approve_leave(request, leave_id):
    """Approve a leave request with optional date and day adjustment."""
    try:
        leave_request = LeaveRequest.objects.select_related('employee').get(id=leave_id)
    except LeaveRequest.DoesNotExist:
        return JsonResponse({'success': False, 'error': 'Leave request not found'}, status=404)

    if leave_request.status != 'pending':
        return JsonResponse({'success': False, 'error': 'This request has already been processed'}, status=409)

    data = read_json_body(request)
    admin_notes = (data.get('admin_notes') or '').strip()

    # Update dates if provided, recounting the chargeable days
    if data.get('start_date') and data.get('end_date'):
        try:
            new_start_date = parse_iso_date(data['start_date'])
            new_end_date = parse_iso_date(data['end_date'])
        except ValueError:
            return JsonResponse({'success': False, 'error': 'Invalid date format'}, status=400)

        if new_start_date <= new_end_date:
            counted = count_working_days(new_start_date, new_end_date, leave_request.employee)
            leave_request.start_date = new_start_date
            leave_request.end_date = new_end_date
            leave_request.requested_days = counted.working_days
            leave_request.holiday_days = counted.holiday_days

    try:
        approved_days = int(data['approved_days']) if data.get('approved_days') else leave_request.requested_days
    except (TypeError, ValueError):
        approved_days = leave_request.requested_days

    # Never approve more than the working days in the range
    approved_days = max(0, min(approved_days, leave_request.requested_days))

    with transaction.atomic():
        leave_request.status = 'approved'
        leave_request.approved_days = approved_days
        leave_request.admin_notes = admin_notes
        leave_request.reviewed_at = timezone.now()
        leave_request.save()

        if leave_request.leave_type_id:
            LeaveBalance.objects.filter(
                employee=leave_request.employee,
                leave_type_id=leave_request.leave_type_id
            ).update(used_days=F('used_days') + approved_days)

    logger.info("Leave %s approved for %s day(s)", leave_request.id, approved_days)
    return JsonResponse({
        'success': True,
        'message': f'Leave approved for {approved_days} day(s)'
    })


@login_required
@user_passes_test(superuser_required)
@require_http_methods(["POST"])
def reject_leave(request, leave_id):
    """Reject a leave request."""
    try:
        leave_request = LeaveRequest.objects.get(id=leave_id)
    except LeaveRequest.DoesNotExist:
        return JsonResponse({'success': False, 'error': 'Leave request not found'}, status=404)

    if leave_request.status != 'pending':
        return JsonResponse({'success': False, 'error': 'This request has already been processed'}, status=409)

    admin_notes = (read_json_body(request).get('admin_notes') or '').strip()
    if not admin_notes:
        return JsonResponse({'success': False, 'error': 'Please provide a reason for rejection'}, status=400)

    leave_request.status = 'rejected'
    leave_request.admin_notes = admin_notes
    leave_request.reviewed_at = timezone.now()
    leave_request.save()

    return JsonResponse({'success': True, 'message': 'Leave request rejected'})
