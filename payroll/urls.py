from django.urls import path
from . import views

urlpatterns = [
    path('', views.payroll_dashboard, name='payroll_dashboard'),
    path('download/', views.download_payslips, name='download_payslips'),
    # API endpoints for policies
    path('api/policies/', views.get_policies, name='get_policies'),
    path('api/policies/update/', views.update_policies, name='update_policies'),
    # API endpoints for payslips
    path('api/payslips/generate/', views.create_payslip, name='generate_payslip'),
    path('api/payslips/run/', views.run_payroll, name='run_payroll'),
    path('api/payslips/<int:payslip_id>/', views.payslip_detail, name='payslip_detail'),
    path('api/payslips/delete/<int:payslip_id>/', views.delete_payslip, name='delete_payslip'),
    # API endpoints for salary structures
    path('api/salary/<int:employee_id>/', views.get_salary_structure, name='get_salary_structure'),
    path('api/salary/update/', views.update_salary_structure, name='update_salary_structure'),
]
