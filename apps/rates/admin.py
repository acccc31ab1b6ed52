from django.contrib import admin

from apps.rates.models import RateRecord


@admin.register(RateRecord)
class RateRecordAdmin(admin.ModelAdmin):
    list_display = (
        'id', 'kind', 'value', 'effective_from',
        'fuel_type', 'city', 'is_active', 'created_at',
    )
    list_filter = ('kind', 'fuel_type', 'is_active')
    search_fields = ('city',)
    readonly_fields = ('created_at', 'is_active')
    raw_id_fields = ('created_by',)
