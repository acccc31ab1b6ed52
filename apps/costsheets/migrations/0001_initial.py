from decimal import Decimal

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


PERCENT_VALIDATORS = [
    django.core.validators.MinValueValidator(Decimal('0')),
    django.core.validators.MaxValueValidator(Decimal('100')),
]


def money(help_text=''):
    return models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text=help_text, max_digits=15)


def percent(help_text='', **kwargs):
    return models.DecimalField(
        decimal_places=4,
        default=Decimal('0'),
        help_text=help_text,
        max_digits=7,
        validators=PERCENT_VALIDATORS,
        **kwargs,
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('fleet', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='CostSheet',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('company_name', models.CharField(max_length=200)),
                ('city', models.CharField(blank=True, default='', max_length=100)),
                ('tenure_years', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(10)])),
                ('vehicle_price', money('Ex-showroom price.')),
                ('down_payment_percent', percent('Down payment percent; null means full financing.', null=True, blank=True)),
                ('registration_charges', money()),
                ('monthly_km', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=10)),
                ('daily_hours', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=4)),
                ('drivers_count', models.PositiveSmallIntegerField(default=0)),
                ('driver_salary_per_driver', money()),
                ('parking_charges', money()),
                ('supervisor_cost', money()),
                ('gps_camera_cost', money()),
                ('permit_cost', money()),
                ('rates_as_of', models.DateField(blank=True, null=True)),
                ('interest_rate_percent', percent()),
                ('insurance_rate_percent', percent()),
                ('admin_charge_percent', percent()),
                ('fuel_rate', models.DecimalField(decimal_places=4, default=Decimal('0'), max_digits=10)),
                ('tenure_months', models.PositiveSmallIntegerField(default=0)),
                ('insurance_amount_annual', money()),
                ('insurance_amount', money('Monthly insurance.')),
                ('on_road_price', money()),
                ('down_payment_amount', money()),
                ('loan_amount', money()),
                ('emi_amount', money()),
                ('subtotal_a', money()),
                ('fuel_cost', money()),
                ('maintenance_cost', money('Auto-derived, or entered when maintenance is flat.')),
                ('total_driver_cost', money()),
                ('subtotal_b', money()),
                ('admin_charge_amount', money()),
                ('grand_total', money()),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('PENDING_APPROVAL', 'Pending approval'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected')], db_index=True, default='DRAFT', max_length=20)),
                ('approval_remarks', models.TextField(blank=True, default='')),
                ('submitted_at', models.DateTimeField(blank=True, null=True)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('version', models.PositiveIntegerField(default=1)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='decided_cost_sheets', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='cost_sheets', to=settings.AUTH_USER_MODEL)),
                ('vehicle', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='cost_sheets', to='fleet.vehicle')),
            ],
            options={
                'db_table': 'cost_sheets',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['created_by', 'status'], name='idx_costsheet_creator_status')],
            },
        ),
    ]
