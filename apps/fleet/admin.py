from django.contrib import admin

from apps.fleet.models import Vehicle


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = (
        'id', 'brand', 'model', 'variant', 'fuel_type',
        'mileage_per_unit', 'maintenance_cost_per_km', 'is_active',
    )
    list_filter = ('fuel_type', 'is_active')
    search_fields = ('brand', 'model', 'variant')
    readonly_fields = ('created_at', 'updated_at')
