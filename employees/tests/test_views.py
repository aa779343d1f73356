import datetime
import json

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.urls import reverse

from employees.models import Holiday, LeaveBalance, LeaveRequest, LeaveType
from .helpers import make_admin, make_department, make_employee


class AdminClientMixin:
    def setUp(self):
        self.admin = make_admin()
        self.client.force_login(self.admin)

    def post_json(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type='application/json')


class HolidayViewTests(AdminClientMixin, TestCase):
    def test_create_global_holiday(self):
        response = self.post_json(reverse('create_holiday'), {
            'name': 'Diwali',
            'start_date': '2025-10-20',
            'end_date': '2025-10-21',
        })

        self.assertEqual(response.status_code, 201)
        holiday = Holiday.objects.get()
        self.assertEqual(holiday.holiday_type, Holiday.GLOBAL)
        self.assertEqual(holiday.end_date, datetime.date(2025, 10, 21))

    def test_department_holiday_requires_department(self):
        response = self.post_json(reverse('create_holiday'), {
            'name': 'Team Day',
            'start_date': '2025-10-20',
            'type': Holiday.DEPARTMENT,
        })
        self.assertEqual(response.status_code, 400)
        self.assertFalse(Holiday.objects.exists())

    def test_end_before_start_is_rejected(self):
        response = self.post_json(reverse('create_holiday'), {
            'name': 'Backwards',
            'start_date': '2025-10-20',
            'end_date': '2025-10-19',
        })
        self.assertEqual(response.status_code, 400)

    def test_update_and_delete(self):
        department = make_department('Sales')
        holiday = Holiday.objects.create(
            name='Offsite', start_date=datetime.date(2025, 3, 3), end_date=datetime.date(2025, 3, 3)
        )

        response = self.post_json(reverse('update_holiday', args=[holiday.id]), {
            'type': Holiday.DEPARTMENT,
            'department_id': department.id,
        })
        self.assertEqual(response.status_code, 200)
        holiday.refresh_from_db()
        self.assertEqual(holiday.department, department)

        response = self.client.post(reverse('delete_holiday', args=[holiday.id]))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Holiday.objects.exists())

        response = self.client.post(reverse('delete_holiday', args=[holiday.id]))
        self.assertEqual(response.status_code, 404)

    def test_list_filters_by_year_and_month(self):
        Holiday.objects.create(name='A', start_date=datetime.date(2025, 1, 1), end_date=datetime.date(2025, 1, 1))
        Holiday.objects.create(name='B', start_date=datetime.date(2025, 2, 1), end_date=datetime.date(2025, 2, 1))

        response = self.client.get(reverse('holiday_list'), {'year': 2025, 'month': 2})

        self.assertEqual([h['name'] for h in response.json()['holidays']], ['B'])

    def test_upload_csv(self):
        upload = SimpleUploadedFile(
            'holidays.csv',
            b'name,start_date,end_date\nRepublic Day,2025-01-26,\nPuja,2025-10-01 to 2025-10-03,\n,2025-05-01,\n',
            content_type='text/csv'
        )

        response = self.client.post(reverse('upload_holidays'), {'file': upload})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['created'], 2)
        self.assertEqual(response.json()['skipped'], 1)
        self.assertEqual(Holiday.objects.count(), 2)

    def test_non_superuser_is_redirected(self):
        self.client.logout()
        employee = make_employee('E001')
        self.client.force_login(employee.user)

        response = self.post_json(reverse('create_holiday'), {'name': 'X', 'start_date': '2025-01-01'})

        self.assertEqual(response.status_code, 302)


class LeaveViewTests(AdminClientMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.employee = make_employee('E001')
        self.casual = LeaveType.objects.create(name='Casual Leave', code='CL')
        self.balance = LeaveBalance.objects.create(employee=self.employee, leave_type=self.casual, allocated_days=10)
        # 2025-01-06 (Monday) to 2025-01-12 (Sunday) with a holiday on Wednesday
        Holiday.objects.create(name='Midweek', start_date=datetime.date(2025, 1, 8), end_date=datetime.date(2025, 1, 8))

    def test_preview_counts_working_days(self):
        response = self.client.get(reverse('leave_days_preview'), {
            'employee_id': self.employee.id,
            'start_date': '2025-01-06',
            'end_date': '2025-01-12',
        })
        self.assertEqual(response.json(), {'success': True, 'working_days': 5, 'holiday_days': 1})

    def test_preview_rejects_bad_dates(self):
        response = self.client.get(reverse('leave_days_preview'), {
            'employee_id': self.employee.id,
            'start_date': '2025-01-12',
            'end_date': 'soon',
        })
        self.assertEqual(response.status_code, 400)

    def test_submit_and_approve_updates_balance(self):
        response = self.post_json(reverse('submit_leave_request'), {
            'employee_id': self.employee.id,
            'leave_type_id': self.casual.id,
            'start_date': '2025-01-06',
            'end_date': '2025-01-12',
            'reason': 'Family trip',
        })
        self.assertEqual(response.status_code, 201)
        leave_request = LeaveRequest.objects.get()
        self.assertEqual(leave_request.requested_days, 5)
        self.assertEqual(leave_request.holiday_days, 1)

        response = self.post_json(reverse('approve_leave', args=[leave_request.id]), {'approved_days': 4})
        self.assertEqual(response.status_code, 200)

        leave_request.refresh_from_db()
        self.balance.refresh_from_db()
        self.assertEqual(leave_request.status, 'approved')
        self.assertEqual(leave_request.approved_days, 4)
        self.assertEqual(self.balance.used_days, 4)

        response = self.post_json(reverse('approve_leave', args=[leave_request.id]), {})
        self.assertEqual(response.status_code, 409)

    def test_approved_days_never_exceed_requested(self):
        leave_request = LeaveRequest.objects.create(
            employee=self.employee, leave_type=self.casual,
            start_date=datetime.date(2025, 1, 6), end_date=datetime.date(2025, 1, 7)
        )
        self.post_json(reverse('approve_leave', args=[leave_request.id]), {'approved_days': 9})

        leave_request.refresh_from_db()
        self.assertEqual(leave_request.approved_days, 2)

    def test_submit_rejects_insufficient_balance(self):
        self.balance.used_days = 8
        self.balance.save()

        response = self.post_json(reverse('submit_leave_request'), {
            'employee_id': self.employee.id,
            'leave_type_id': self.casual.id,
            'start_date': '2025-01-06',
            'end_date': '2025-01-12',
        })
        self.assertEqual(response.status_code, 400)
        self.assertFalse(LeaveRequest.objects.exists())

    def test_submit_rejects_range_without_working_days(self):
        response = self.post_json(reverse('submit_leave_request'), {
            'employee_id': self.employee.id,
            'start_date': '2025-01-12',
            'end_date': '2025-01-12',
        })
        self.assertEqual(response.status_code, 400)

    def test_reject_requires_notes(self):
        leave_request = LeaveRequest.objects.create(
            employee=self.employee, start_date=datetime.date(2025, 1, 6), end_date=datetime.date(2025, 1, 6)
        )

        response = self.post_json(reverse('reject_leave', args=[leave_request.id]), {})
        self.assertEqual(response.status_code, 400)

        response = self.post_json(reverse('reject_leave', args=[leave_request.id]), {'admin_notes': 'Busy week'})
        self.assertEqual(response.status_code, 200)
        leave_request.refresh_from_db()
        self.assertEqual(leave_request.status, 'rejected')
