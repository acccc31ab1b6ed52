from django.contrib import admin

from apps.costsheets.models import CostSheet


@admin.register(CostSheet)
class CostSheetAdmin(admin.ModelAdmin):
    list_display = (
        'id', 'company_name', 'vehicle', 'tenure_years',
        'grand_total', 'status', 'created_by', 'created_at',
    )
    list_filter = ('status', 'tenure_years')
    search_fields = ('company_name', 'city')
    raw_id_fields = ('vehicle', 'created_by', 'approved_by')
    readonly_fields = (
        'rates_as_of', 'interest_rate_percent', 'insurance_rate_percent',
        'admin_charge_percent', 'fuel_rate', 'tenure_months',
        'insurance_amount_annual', 'insurance_amount', 'on_road_price',
        'down_payment_amount', 'loan_amount', 'emi_amount', 'subtotal_a',
        'fuel_cost', 'total_driver_cost', 'subtotal_b', 'admin_charge_amount',
        'grand_total', 'status', 'submitted_at', 'approved_at', 'approved_by',
        'version', 'created_at', 'updated_at',
    )
