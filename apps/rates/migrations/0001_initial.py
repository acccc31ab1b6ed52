from decimal import Decimal

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='RateRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('INTEREST', 'Interest rate (% p.a.)'), ('INSURANCE', 'Insurance rate (% of vehicle price p.a.)'), ('ADMIN_CHARGE', 'Admin charge (%)'), ('FUEL', 'Fuel price per unit')], db_index=True, max_length=20)),
                ('value', models.DecimalField(decimal_places=4, help_text='Percentage for INTEREST/INSURANCE/ADMIN_CHARGE, price per unit for FUEL.', max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('effective_from', models.DateField(db_index=True)),
                ('is_active', models.BooleanField(db_index=True, default=False)),
                ('fuel_type', models.CharField(blank=True, choices=[('PETROL', 'Petrol'), ('DIESEL', 'Diesel'), ('HYBRID', 'Hybrid'), ('EV', 'Electric')], default='', help_text='FUEL records only.', max_length=10)),
                ('city', models.CharField(blank=True, default='', help_text='FUEL records only. Blank means the national rate.', max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'rate_records',
                'ordering': ['kind', '-effective_from', '-id'],
                'indexes': [models.Index(fields=['kind', 'fuel_type', 'city', 'effective_from'], name='idx_rate_key_effective')],
            },
        ),
    ]
