from django.urls import path
from . import views

urlpatterns = [
    # Holiday calendar
    path('holidays/', views.holiday_list, name='holiday_list'),
    path('holidays/create/', views.create_holiday, name='create_holiday'),
    path('holidays/upload/', views.upload_holidays, name='upload_holidays'),
    path('holidays/<int:holiday_id>/update/', views.update_holiday, name='update_holiday'),
    path('holidays/<int:holiday_id>/delete/', views.delete_holiday, name='delete_holiday'),
    # Leave
    path('leave/days/', views.leave_days_preview, name='leave_days_preview'),
    path('leave/submit/', views.submit_leave_request, name='submit_leave_request'),
    path('leave-requests/', views.leave_management, name='leave_management'),
    path('leave/<int:leave_id>/approve/', views.approve_leave_request, name='approve_leave'),
    path('leave/<int:leave_id>/reject/', views.reject_leave_request, name='reject_leave'),
]
