from django.db import migrations

from payroll.policy import DEFAULT_POLICIES


def seed_policies(apps, schema_editor):
    PayrollPolicy = apps.get_model('payroll', 'PayrollPolicy')
    for key, (value, description) in DEFAULT_POLICIES.items():
        PayrollPolicy.objects.update_or_create(
            key=key,
            defaults={'value': value, 'description': description}
        )


def remove_policies(apps, schema_editor):
    PayrollPolicy = apps.get_model('payroll', 'PayrollPolicy')
    PayrollPolicy.objects.filter(key__in=list(DEFAULT_POLICIES)).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('payroll', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_policies, remove_policies),
    ]
