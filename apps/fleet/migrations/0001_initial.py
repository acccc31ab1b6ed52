from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Vehicle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('brand', models.CharField(max_length=100)),
                ('model', models.CharField(max_length=100)),
                ('variant', models.CharField(blank=True, default='', max_length=100)),
                ('fuel_type', models.CharField(choices=[('PETROL', 'Petrol'), ('DIESEL', 'Diesel'), ('HYBRID', 'Hybrid'), ('EV', 'Electric')], db_index=True, max_length=10)),
                ('mileage_per_unit', models.DecimalField(decimal_places=2, help_text='Distance per unit of fuel (must be > 0).', max_digits=8, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('maintenance_cost_per_km', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Maintenance cost per km, used when maintenance is auto-derived.', max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('is_active', models.BooleanField(db_index=True, default=True, help_text='Inactive vehicles cannot be chosen for new cost sheets.')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'vehicles',
                'ordering': ['brand', 'model', 'variant'],
                'indexes': [models.Index(fields=['brand', 'model', 'variant'], name='idx_vehicle_brand_model')],
            },
        ),
    ]
