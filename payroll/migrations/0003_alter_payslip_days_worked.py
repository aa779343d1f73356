from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('payroll', '0002_default_policies'),
    ]

    operations = [
        migrations.AlterField(
            model_name='payslip',
            name='days_worked',
            field=models.PositiveSmallIntegerField(default=0, help_text='Payable days out of 30'),
        ),
    ]
