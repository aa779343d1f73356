"""
Payroll views: payslips, policies and salary structures.
"""

import datetime
import logging
from decimal import Decimal, InvalidOperation
from io import BytesIO
from django.db import transaction
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods
from django.contrib.auth.decorators import login_required, user_passes_test
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side

from employees.models import Employee
from employees.views.utils import superuser_required, parse_iso_date, read_json_body
from .engine import Outcome, generate_payslip, resolve_period, run_payroll as run_payroll_batch
from .models import Payslip, SalaryHistory, SalaryStructure
from .policy import PolicyError, get_policy_map, load_policy_snapshot, save_policies

logger = logging.getLogger(__name__)

MONEY_FIELDS = (
    'basic', 'hra', 'da', 'allowances', 'gross_salary',
    'pf', 'esic', 'ptax', 'total_earnings', 'total_deductions', 'net_pay',
)
SALARY_FIELDS = ('basic', 'hra', 'da', 'allowances', 'deductions')

# HTTP status for each skip when generating a single payslip
SKIP_RESPONSES = {
    Outcome.SKIPPED_NO_ACCOUNT: (422, 'Employee account is inactive'),
    Outcome.SKIPPED_NO_SALARY: (404, 'Salary structure not found for this employee'),
    Outcome.SKIPPED_ALREADY_EXISTS: (409, 'Payslip already generated for this month'),
    Outcome.SKIPPED_NOT_YET_JOINED: (422, 'Employee joined after this month'),
}


def serialize_payslip(payslip):
    data = {
        'id': payslip.id,
        'employee_id': payslip.employee_id,
        'employee_code': payslip.employee.employee_code,
        'employee_name': payslip.employee.name,
        'month': payslip.month,
        'year': payslip.year,
        'days_worked': payslip.days_worked,
        'generated_on': payslip.generated_on.strftime('%Y-%m-%d %H:%M'),
    }
    for name in MONEY_FIELDS:
        data[name] = float(getattr(payslip, name))
    return data


def serialize_structure(structure):
    data = {name: float(getattr(structure, name)) for name in SALARY_FIELDS + ('gross_salary',)}
    data['effective_from'] = structure.effective_from.strftime('%Y-%m-%d') if structure.effective_from else None
    return data


def _period_from_request(params):
    return resolve_period(params.get('month') or None, params.get('year') or None)


@login_required
@user_passes_test(superuser_required)
def payroll_dashboard(request):
    """Payslips generated for the selected month with totals."""
    try:
        month, year = _period_from_request(request.GET)
    except ValueError:
        return JsonResponse({'success': False, 'error': 'Invalid year/month'}, status=400)

    payslips = Payslip.objects.filter(month=month, year=year).select_related('employee')
    data = [serialize_payslip(p) for p in payslips]

    return JsonResponse({
        'success': True,
        'month': month,
        'year': year,
        'payslips': data,
        'total_gross': round(sum(p['gross_salary'] for p in data), 2),
        'total_deductions': round(sum(p['total_deductions'] for p in data), 2),
        'total_net_pay': round(sum(p['net_pay'] for p in data), 2),
    })


# ============================================
# Policy Endpoints
# ============================================

@login_required
@user_passes_test(superuser_required)
def get_policies(request):
    """Return policies as a key/value map."""
    return JsonResponse(get_policy_map())


@login_required
@user_passes_test(superuser_required)
@require_http_methods(["POST"])
def update_policies(request):
    """Validate and store payroll policies."""
    try:
        data = read_json_body(request)
        save_policies(data)
    except PolicyError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=422)
    except ValueError:
        return JsonResponse({'success': False, 'error': 'Invalid JSON'}, status=400)

    return JsonResponse({'success': True, 'message': 'Policies updated successfully'})


# ============================================
# Payslip Endpoints
# ============================================

@login_required
@user_passes_test(superuser_required)
@require_http_methods(["POST"])
def create_payslip(request):
    """Generate the payslip of one employee for one month."""
    try:
        data = read_json_body(request)
        if not data.get('employee_id'):
            return JsonResponse({'success': False, 'error': 'Missing required fields: employee_id'}, status=400)
        month, year = _period_from_request(data)
        employee = Employee.objects.select_related('user').get(id=data['employee_id'])
    except Employee.DoesNotExist:
        return JsonResponse({'success': False, 'error': 'Employee not found'}, status=404)
    except ValueError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=400)

    try:
        result = generate_payslip(employee, month, year, load_policy_snapshot())
    except Exception as e:
        logger.exception("Payslip generation failed for %s", employee.employee_code)
        return JsonResponse({'success': False, 'error': f'Server error: {str(e)}'}, status=500)

    if result.outcome != Outcome.GENERATED:
        status, message = SKIP_RESPONSES[result.outcome]
        return JsonResponse({'success': False, 'error': message, 'outcome': result.outcome.value}, status=status)

    return JsonResponse({
        'success': True,
        'message': 'Payslip generated successfully',
        'payslip': serialize_payslip(result.payslip)
    }, status=201)


@login_required
@user_passes_test(superuser_required)
@require_http_methods(["POST"])
def run_payroll(request):
    """Generate payslips for every eligible employee."""
    try:
        month, year = _period_from_request(read_json_body(request))
    except ValueError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=400)

    result = run_payroll_batch(month, year)
    return JsonResponse({'success': True, **result.summary()})


@login_required
@user_passes_test(superuser_required)
def payslip_detail(request, payslip_id):
    try:
        payslip = Payslip.objects.select_related('employee').get(id=payslip_id)
    except Payslip.DoesNotExist:
        return JsonResponse({'success': False, 'error': 'Payslip not found'}, status=404)
    return JsonResponse({'success': True, 'payslip': serialize_payslip(payslip)})


@login_required
@user_passes_test(superuser_required)
@require_http_methods(["POST"])
def delete_payslip(request, payslip_id):
    """Delete a payslip so it can be generated again."""
    try:
        payslip = Payslip.objects.get(id=payslip_id)
        payslip.delete()
        return JsonResponse({'success': True, 'message': 'Payslip deleted'})
    except Payslip.DoesNotExist:
        return JsonResponse({'success': False, 'error': 'Payslip not found'}, status=404)


# ============================================
# Salary Structure Endpoints
# ============================================

@login_required
@user_passes_test(superuser_required)
def get_salary_structure(request, employee_id):
    """Current salary structure of an employee and its history."""
    try:
        employee = Employee.objects.get(id=employee_id)
    except Employee.DoesNotExist:
        return JsonResponse({'success': False, 'error': 'Employee not found'}, status=404)

    structure = SalaryStructure.objects.filter(employee=employee).first()
    history = SalaryHistory.objects.filter(employee=employee)

    return JsonResponse({
        'success': True,
        'employee_name': employee.name,
        'current': serialize_structure(structure) if structure else None,
        'history': [
            dict(serialize_structure(h), archived_on=h.archived_on.strftime('%Y-%m-%d %H:%M'))
            for h in history
        ],
    })


@login_required
@user_passes_test(superuser_required)
@require_http_methods(["POST"])
def update_salary_structure(request):
    """Create or replace an employee's salary structure, archiving the old one."""
    try:
        data = read_json_body(request)
        employee = Employee.objects.get(id=data.get('employee_id'))
        components = {}
        for name in SALARY_FIELDS:
            components[name] = Decimal(str(data.get(name) or 0))
            if components[name] < 0:
                raise ValueError(f'{name} cannot be negative')
        effective_from = parse_iso_date(data['effective_from']) if data.get('effective_from') else datetime.date.today()
    except Employee.DoesNotExist:
        return JsonResponse({'success': False, 'error': 'Employee not found'}, status=404)
    except (ValueError, InvalidOperation) as e:
        return JsonResponse({'success': False, 'error': f'Invalid data format: {str(e)}'}, status=400)

    with transaction.atomic():
        structure = SalaryStructure.objects.select_for_update().filter(employee=employee).first()
        if structure is not None:
            SalaryHistory.objects.create(
                employee=employee,
                effective_from=structure.effective_from,
                gross_salary=structure.gross_salary,
                **{name: getattr(structure, name) for name in SALARY_FIELDS}
            )
        else:
            structure = SalaryStructure(employee=employee)

        for name, value in components.items():
            setattr(structure, name, value)
        structure.effective_from = effective_from
        structure.gross_salary = structure.compute_gross()
        structure.save()

    return JsonResponse({
        'success': True,
        'message': 'Salary structure saved',
        'salary': serialize_structure(structure)
    })


# ============================================
# Downloads
# ============================================

MONTH_NAMES = ['', 'January', 'February', 'March', 'April', 'May', 'June',
               'July', 'August', 'September', 'October', 'November', 'December']

REGISTER_HEADERS = [
    'Employee Code', 'Employee Name', 'Days Worked', 'Basic', 'HRA', 'DA', 'Allowances',
    'Gross Salary', 'PF', 'ESIC', 'PTAX', 'Total Deductions', 'Net Pay',
]


@login_required
@user_passes_test(superuser_required)
def download_payslips(request):
    """Download the payslip register for the selected month as XLSX."""
    try:
        month, year = _period_from_request(request.GET)
    except ValueError:
        return JsonResponse({'success': False, 'error': 'Invalid year/month'}, status=400)

    payslips = Payslip.objects.filter(month=month, year=year).select_related('employee').order_by('employee__name')
    month_name = MONTH_NAMES[month]

    # Create workbook
    wb = Workbook()
    ws = wb.active
    ws.title = f"{month_name} {year}"

    # Styles
    title_font = Font(bold=True, size=14)
    header_fill = PatternFill(start_color="4F81BD", end_color="4F81BD", fill_type="solid")
    header_font_white = Font(bold=True, size=11, color="FFFFFF")
    total_font = Font(bold=True)
    thin_border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(REGISTER_HEADERS))
    ws['A1'] = f"Payslip Register - {month_name} {year}"
    ws['A1'].font = title_font
    ws['A1'].alignment = Alignment(horizontal='center')

    ws.append([])
    ws.append(REGISTER_HEADERS)

    for col in range(1, len(REGISTER_HEADERS) + 1):
        cell = ws.cell(row=3, column=col)
        cell.font = header_font_white
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal='center')
        cell.border = thin_border

    totals = {'gross_salary': Decimal('0'), 'total_deductions': Decimal('0'), 'net_pay': Decimal('0')}
    for payslip in payslips:
        ws.append([
            payslip.employee.employee_code,
            payslip.employee.name,
            payslip.days_worked,
            float(payslip.basic),
            float(payslip.hra),
            float(payslip.da),
            float(payslip.allowances),
            float(payslip.gross_salary),
            float(payslip.pf),
            float(payslip.esic),
            float(payslip.ptax),
            float(payslip.total_deductions),
            float(payslip.net_pay),
        ])
        for col in range(1, len(REGISTER_HEADERS) + 1):
            ws.cell(row=ws.max_row, column=col).border = thin_border
        for key in totals:
            totals[key] += getattr(payslip, key)

    ws.append([])
    ws.append(['', 'Total', '', '', '', '', '', float(totals['gross_salary']), '', '', '',
               float(totals['total_deductions']), float(totals['net_pay'])])
    for cell in ws[ws.max_row]:
        cell.font = total_font

    # Column widths
    ws.column_dimensions['A'].width = 15
    ws.column_dimensions['B'].width = 25
    for letter in 'CDEFGHIJKLM':
        ws.column_dimensions[letter].width = 14

    output = BytesIO()
    wb.save(output)
    output.seek(0)

    filename = f"payslips_{month_name}_{year}.xlsx"
    response = HttpResponse(
        output.read(),
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response
