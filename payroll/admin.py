from django.contrib import admin
from .models import SalaryStructure, SalaryHistory, PayrollPolicy, Payslip


class SalaryHistoryInline(admin.TabularInline):
    model = SalaryHistory
    extra = 0
    ordering = ['-archived_on']
    readonly_fields = ('archived_on',)


@admin.register(SalaryStructure)
class SalaryStructureAdmin(admin.ModelAdmin):
    list_display = ('employee', 'basic', 'hra', 'da', 'allowances', 'gross_salary', 'effective_from')
    search_fields = ('employee__name', 'employee__employee_code')
    ordering = ('employee__name',)
    readonly_fields = ('gross_salary',)
    fieldsets = (
        (None, {
            'fields': ('employee', 'effective_from')
        }),
        ('Monthly Components', {
            'fields': ('basic', 'hra', 'da', 'allowances', 'deductions', 'gross_salary'),
            'description': 'Gross salary is the sum of basic, HRA, DA and allowances.'
        }),
    )

    def save_model(self, request, obj, form, change):
        obj.gross_salary = obj.compute_gross()
        super().save_model(request, obj, form, change)


@admin.register(SalaryHistory)
class SalaryHistoryAdmin(admin.ModelAdmin):
    list_display = ('employee', 'gross_salary', 'effective_from', 'archived_on')
    search_fields = ('employee__name', 'employee__employee_code')
    ordering = ('-archived_on',)


@admin.register(PayrollPolicy)
class PayrollPolicyAdmin(admin.ModelAdmin):
    list_display = ('key', 'value', 'description', 'updated_at')
    search_fields = ('key', 'description')
    ordering = ('key',)


@admin.register(Payslip)
class PayslipAdmin(admin.ModelAdmin):
    list_display = ('employee', 'year', 'month', 'days_worked', 'gross_salary', 'total_deductions', 'net_pay')
    list_filter = ('year', 'month')
    search_fields = ('employee__name', 'employee__employee_code')
    ordering = ('-year', '-month', 'employee__name')
    readonly_fields = ('generated_on',)
    fieldsets = (
        (None, {
            'fields': ('employee', 'month', 'year', 'days_worked', 'generated_on')
        }),
        ('Earnings', {
            'fields': ('basic', 'hra', 'da', 'allowances', 'gross_salary', 'total_earnings'),
        }),
        ('Deductions', {
            'fields': ('pf', 'esic', 'ptax', 'total_deductions'),
        }),
        ('Net Pay', {
            'fields': ('net_pay',),
        }),
    )
