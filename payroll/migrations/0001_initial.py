import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


def money():
    return models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('employees', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PayrollPolicy',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(max_length=100, unique=True)),
                ('value', models.TextField(blank=True, null=True)),
                ('description', models.CharField(blank=True, max_length=255, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['key'],
                'verbose_name_plural': 'Payroll Policies',
            },
        ),
        migrations.CreateModel(
            name='SalaryStructure',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('basic', money()),
                ('hra', money()),
                ('da', money()),
                ('allowances', money()),
                ('deductions', money()),
                ('gross_salary', money()),
                ('effective_from', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('employee', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='salary_structure', to='employees.employee')),
            ],
        ),
        migrations.CreateModel(
            name='SalaryHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('basic', money()),
                ('hra', money()),
                ('da', money()),
                ('allowances', money()),
                ('deductions', money()),
                ('gross_salary', money()),
                ('effective_from', models.DateField(blank=True, null=True)),
                ('archived_on', models.DateTimeField(auto_now_add=True)),
                ('employee', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='salary_history', to='employees.employee')),
            ],
            options={
                'ordering': ['-archived_on'],
                'verbose_name_plural': 'Salary Histories',
            },
        ),
        migrations.CreateModel(
            name='Payslip',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('month', models.IntegerField(help_text='1-12')),
                ('year', models.IntegerField()),
                ('days_worked', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('basic', money()),
                ('hra', money()),
                ('da', money()),
                ('allowances', money()),
                ('gross_salary', money()),
                ('pf', money()),
                ('esic', money()),
                ('ptax', money()),
                ('total_earnings', money()),
                ('total_deductions', money()),
                ('net_pay', money()),
                ('generated_on', models.DateTimeField()),
                ('employee', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payslips', to='employees.employee')),
            ],
            options={
                'ordering': ['-year', '-month', 'employee__name'],
            },
        ),
        migrations.AddConstraint(
            model_name='payslip',
            constraint=models.UniqueConstraint(fields=('employee', 'month', 'year'), name='unique_payslip_per_employee_period'),
        ),
    ]
