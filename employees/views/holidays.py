"""
Holiday calendar views.
Handles listing, admin CRUD and Excel import of holidays.
"""

import logging
from django.core.exceptions import ValidationError
from django.db import transaction
from django.http import JsonResponse
from django.views.decorators.http import require_http_methods
from django.contrib.auth.decorators import login_required, user_passes_test

from ..holiday_import import read_holiday_sheet, build_holidays
from ..models import Department, Holiday
from .utils import superuser_required, parse_iso_date, read_json_body

logger = logging.getLogger(__name__)


def serialize_holiday(holiday):
    return {
        'id': holiday.id,
        'name': holiday.name,
        'start_date': holiday.start_date.strftime('%Y-%m-%d'),
        'end_date': holiday.end_date.strftime('%Y-%m-%d'),
        'type': holiday.holiday_type,
        'department_id': holiday.department_id,
        'location': holiday.location,
    }


def _apply_holiday_data(holiday, data):
    """Copy submitted fields onto the holiday and validate it."""
    if 'name' in data:
        holiday.name = str(data['name']).strip()
    if 'start_date' in data:
        holiday.start_date = parse_iso_date(data['start_date'])
    if 'end_date' in data:
        holiday.end_date = parse_iso_date(data['end_date'])
    elif holiday.end_date is None:
        holiday.end_date = holiday.start_date
    if 'type' in data:
        holiday.holiday_type = data['type']

    if 'department_id' in data:
        department_id = data['department_id']
        holiday.department = Department.objects.get(id=department_id) if department_id else None
    if 'location' in data:
        holiday.location = (data['location'] or '').strip() or None

    # Scope fields only make sense for their own type
    if holiday.holiday_type != Holiday.DEPARTMENT:
        holiday.department = None
    if holiday.holiday_type != Holiday.LOCATION:
        holiday.location = None

    holiday.full_clean()
    return holiday


@login_required
def holiday_list(request):
    """List holidays, optionally filtered by year and month of the start date."""
    holidays = Holiday.objects.all().order_by('start_date')
    try:
        if request.GET.get('year'):
            holidays = holidays.filter(start_date__year=int(request.GET['year']))
        if request.GET.get('month'):
            holidays = holidays.filter(start_date__month=int(request.GET['month']))
    except ValueError:
        return JsonResponse({'success': False, 'error': 'Invalid year/month'}, status=400)

    return JsonResponse({
        'success': True,
        'holidays': [serialize_holiday(h) for h in holidays],
    })


@login_required
@user_passes_test(superuser_required)
@require_http_methods(["POST"])
def create_holiday(request):
    """Create a holiday (Global, Department or Location)."""
    try:
        data = read_json_body(request)
        if not data.get('name') or not data.get('start_date'):
            return JsonResponse({'success': False, 'error': 'Missing required fields: name, start_date'}, status=400)

        holiday = _apply_holiday_data(Holiday(), data)
        holiday.save()

        return JsonResponse({
            'success': True,
            'message': 'Holiday created successfully',
            'holiday': serialize_holiday(holiday)
        }, status=201)

    except Department.DoesNotExist:
        return JsonResponse({'success': False, 'error': 'Department not found'}, status=404)
    except ValidationError as e:
        return JsonResponse({'success': False, 'error': e.message_dict}, status=400)
    except ValueError as e:
        return JsonResponse({'success': False, 'error': f'Invalid data format: {str(e)}'}, status=400)


@login_required
@user_passes_test(superuser_required)
@require_http_methods(["POST"])
def update_holiday(request, holiday_id):
    """Update an existing holiday."""
    try:
        holiday = Holiday.objects.get(id=holiday_id)
        data = read_json_body(request)
        holiday = _apply_holiday_data(holiday, data)
        holiday.save()

        return JsonResponse({
            'success': True,
            'message': 'Holiday updated successfully',
            'holiday': serialize_holiday(holiday)
        })

    except Holiday.DoesNotExist:
        return JsonResponse({'success': False, 'error': 'Holiday not found'}, status=404)
    except Department.DoesNotExist:
        return JsonResponse({'success': False, 'error': 'Department not found'}, status=404)
    except ValidationError as e:
        return JsonResponse({'success': False, 'error': e.message_dict}, status=400)
    except ValueError as e:
        return JsonResponse({'success': False, 'error': f'Invalid data format: {str(e)}'}, status=400)


@login_required
@user_passes_test(superuser_required)
@require_http_methods(["POST"])
def delete_holiday(request, holiday_id):
    """Delete a holiday."""
    try:
        holiday = Holiday.objects.get(id=holiday_id)
        holiday.delete()
        return JsonResponse({'success': True, 'message': 'Holiday deleted successfully'})
    except Holiday.DoesNotExist:
        return JsonResponse({'success': False, 'error': 'Holiday not found'}, status=404)


@login_required
@user_passes_test(superuser_required)
@require_http_methods(["POST"])
def upload_holidays(request):
    """Handle Excel/CSV upload of global holidays."""
    uploaded = request.FILES.get('file')
    if not uploaded:
        return JsonResponse({'success': False, 'error': 'Please choose a file.'}, status=400)

    try:
        df = read_holiday_sheet(uploaded)
        holidays, skipped = build_holidays(df)
        with transaction.atomic():
            Holiday.objects.bulk_create(holidays)
    except Exception as e:
        logger.exception("Holiday import failed for %s", uploaded.name)
        return JsonResponse({'success': False, 'error': f'Error processing file: {str(e)}'}, status=400)

    logger.info("Imported %s holidays from %s (%s rows skipped)", len(holidays), uploaded.name, skipped)
    return JsonResponse({
        'success': True,
        'message': f'Holidays imported! Created {len(holidays)}, skipped {skipped}.',
        'created': len(holidays),
        'skipped': skipped,
    })
