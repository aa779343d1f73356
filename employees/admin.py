from django.contrib import admin
from .models import Department, Employee, Holiday, LeaveType, LeaveBalance, LeaveRequest


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('name', 'created_at')
    search_fields = ('name',)
    ordering = ('name',)


class LeaveBalanceInline(admin.TabularInline):
    model = LeaveBalance
    extra = 0


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ('employee_code', 'name', 'department', 'location', 'date_of_joining', 'has_active_account')
    list_filter = ('department', 'location', 'pf_opt_out', 'esic_opt_out', 'ptax_opt_out')
    search_fields = ('employee_code', 'name', 'email')
    ordering = ('name',)
    inlines = [LeaveBalanceInline]
    fieldsets = (
        (None, {
            'fields': ('employee_code', 'name', 'user')
        }),
        ('Organization', {
            'fields': ('department', 'location', 'designation', 'date_of_joining'),
        }),
        ('Statutory Deductions', {
            'fields': ('pf_opt_out', 'esic_opt_out', 'ptax_opt_out'),
            'description': 'Opted-out deductions are never applied, whatever the global policy says.'
        }),
        ('Contact', {
            'fields': ('email', 'phone'),
            'classes': ('collapse',)
        }),
    )

    @admin.display(boolean=True, description='Active account')
    def has_active_account(self, obj):
        return obj.has_active_account


# ============================================
# Holiday Admin
# ============================================

@admin.register(Holiday)
class HolidayAdmin(admin.ModelAdmin):
    list_display = ('name', 'start_date', 'end_date', 'holiday_type', 'department', 'location')
    list_filter = ('holiday_type', 'department', 'start_date')
    search_fields = ('name', 'location')
    ordering = ('-start_date',)
    date_hierarchy = 'start_date'


# ============================================
# Leave Admin
# ============================================

@admin.register(LeaveType)
class LeaveTypeAdmin(admin.ModelAdmin):
    list_display = ('code', 'name')
    search_fields = ('code', 'name')


@admin.register(LeaveBalance)
class LeaveBalanceAdmin(admin.ModelAdmin):
    list_display = ('employee', 'leave_type', 'allocated_days', 'used_days', 'remaining_days')
    list_filter = ('leave_type',)
    search_fields = ('employee__name', 'employee__employee_code')


@admin.register(LeaveRequest)
class LeaveRequestAdmin(admin.ModelAdmin):
    list_display = ('employee', 'leave_type', 'start_date', 'end_date', 'requested_days', 'holiday_days', 'approved_days', 'status', 'created_at')
    list_filter = ('status', 'leave_type', 'created_at')
    search_fields = ('employee__name', 'employee__employee_code', 'reason')
    ordering = ('-created_at',)
    date_hierarchy = 'start_date'
    readonly_fields = ('created_at', 'reviewed_at', 'requested_days', 'holiday_days')

    fieldsets = (
        ('Employee', {
            'fields': ('employee',)
        }),
        ('Leave Details', {
            'fields': ('leave_type', 'start_date', 'end_date', 'requested_days', 'holiday_days', 'reason')
        }),
        ('Approval', {
            'fields': ('status', 'approved_days', 'admin_notes', 'reviewed_at')
        }),
        ('Timestamps', {
            'fields': ('created_at',),
            'classes': ('collapse',)
        }),
    )
