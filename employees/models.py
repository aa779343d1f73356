from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Department(models.Model):
    name = models.CharField(max_length=100, unique=True)

    # Audit timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Employee(models.Model):
    """
    Employee record used by leave and payroll processing.
    The linked user account owns the active flag.
    """
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='employee'
    )
    employee_code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=100)
    email = models.EmailField(null=True, blank=True, db_index=True)
    phone = models.CharField(max_length=20, null=True, blank=True)
    department = models.ForeignKey(
        Department,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='employees'
    )
    location = models.CharField(max_length=255, null=True, blank=True,
        help_text="Office location, matched exactly against location holidays")
    designation = models.CharField(max_length=100, null=True, blank=True)
    date_of_joining = models.DateField(null=True, blank=True)

    # Statutory deduction opt-outs
    pf_opt_out = models.BooleanField(default=False)
    esic_opt_out = models.BooleanField(default=False)
    ptax_opt_out = models.BooleanField(default=False)

    # Audit timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.employee_code})"

    @property
    def has_active_account(self):
        return self.user is not None and self.user.is_active


class HolidayQuerySet(models.QuerySet):

    def for_employee(self, employee):
        """Holidays whose scope covers the employee."""
        scope = Q(holiday_type=Holiday.GLOBAL)
        if employee.department_id is not None:
            scope |= Q(holiday_type=Holiday.DEPARTMENT, department_id=employee.department_id)
        if employee.location is not None:
            scope |= Q(holiday_type=Holiday.LOCATION, location=employee.location)
        return self.filter(scope)

    def overlapping(self, start_date, end_date):
        return self.filter(start_date__lte=end_date, end_date__gte=start_date)


class Holiday(models.Model):
    """Holiday spanning one or more days, scoped globally, to a department or to a location."""
    GLOBAL = 'Global'
    DEPARTMENT = 'Department'
    LOCATION = 'Location'
    TYPE_CHOICES = [
        (GLOBAL, 'Global'),
        (DEPARTMENT, 'Department'),
        (LOCATION, 'Location'),
    ]

    name = models.CharField(max_length=100)  # e.g., "Diwali", "Durga Puja"
    start_date = models.DateField(db_index=True)
    end_date = models.DateField(db_index=True)
    holiday_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=GLOBAL)
    department = models.ForeignKey(
        Department,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='holidays'
    )
    location = models.CharField(max_length=255, null=True, blank=True)

    # Audit timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = HolidayQuerySet.as_manager()

    class Meta:
        ordering = ['start_date']

    def __str__(self):
        if self.start_date == self.end_date:
            return f"{self.name} ({self.start_date})"
        return f"{self.name} ({self.start_date} to {self.end_date})"

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({'end_date': 'End date cannot be before start date.'})
        if self.holiday_type == self.DEPARTMENT and not self.department_id:
            raise ValidationError({'department': 'Department holidays need a department.'})
        if self.holiday_type == self.LOCATION and not self.location:
            raise ValidationError({'location': 'Location holidays need a location.'})

    def covers(self, day):
        return self.start_date <= day <= self.end_date

    def applies_to(self, employee):
        """Check whether this holiday's scope matches the employee."""
        if self.holiday_type == self.GLOBAL:
            return True
        if self.holiday_type == self.DEPARTMENT:
            return self.department_id is not None and self.department_id == employee.department_id
        if self.holiday_type == self.LOCATION:
            return self.location is not None and self.location == employee.location
        return False


class LeaveType(models.Model):
    name = models.CharField(max_length=100)
    code = models.CharField(max_length=20, unique=True)  # e.g., "CL", "SL"

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class LeaveBalance(models.Model):
    """Allocated and used leave days per employee and leave type."""
    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='leave_balances')
    leave_type = models.ForeignKey(LeaveType, on_delete=models.CASCADE, related_name='balances')
    allocated_days = models.PositiveIntegerField(default=0)
    used_days = models.PositiveIntegerField(default=0)

    # Audit timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('employee', 'leave_type')

    def __str__(self):
        return f"{self.employee.name} - {self.leave_type.code}: {self.remaining_days} left"

    @property
    def remaining_days(self):
        return self.allocated_days - self.used_days


class LeaveRequest(models.Model):
    """
    Leave request from employees.
    requested_days counts working days only: Sundays and holidays
    in the range are excluded and reported as holiday_days.
    """
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]

    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='leave_requests')
    leave_type = models.ForeignKey(
        LeaveType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='requests'
    )

    # Leave details
    start_date = models.DateField()
    end_date = models.DateField()
    reason = models.TextField(blank=True)

    # Calculated and admin-editable days
    requested_days = models.PositiveIntegerField(default=0, help_text="Working days in the range")
    holiday_days = models.PositiveIntegerField(default=0, help_text="Holidays skipped in the range")
    approved_days = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Number of days approved (can be less than requested)"
    )

    # Status tracking
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    admin_notes = models.TextField(blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['employee', 'start_date'], name='employees_l_employe_6c1f2e_idx'),
            models.Index(fields=['status'], name='employees_l_status_9a4b1d_idx'),
        ]

    def __str__(self):
        return f"{self.employee.name} ({self.start_date} to {self.end_date})"

    def save(self, *args, **kwargs):
        # Count working days on first save
        if self._state.adding and not self.requested_days:
            from .services import count_working_days
            counted = count_working_days(self.start_date, self.end_date, self.employee)
            self.requested_days = counted.working_days
            self.holiday_days = counted.holiday_days
        super().save(*args, **kwargs)

    def get_effective_days(self):
        """Return approved days if approved, otherwise requested days."""
        if self.status == 'approved' and self.approved_days is not None:
            return self.approved_days
        return self.requested_days
