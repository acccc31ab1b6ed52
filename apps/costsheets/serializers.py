"""
Cost sheet serializers for the Fleet Cost Sheet System.

Input serializers check types and presence only; ranges and business
rules are checked by ``apps.costsheets.validation`` so the same rules
apply to previews, saves and edits.
"""

from decimal import Decimal

from rest_framework import serializers

from apps.accounts.permissions import actor_for_user
from apps.costsheets import workflow
from apps.costsheets.calculations import CostSheetInput
from apps.costsheets.models import CostSheet, CostSheetStatus
from apps.rates.serializers import ResolvedRatesSerializer


def _money(**kwargs):
    kwargs.setdefault('required', False)
    kwargs.setdefault('default', Decimal('0'))
    return serializers.DecimalField(max_digits=15, decimal_places=2, **kwargs)


class CostSheetInputSerializer(serializers.Serializer):
    """Serializer for the user-supplied cost sheet fields."""

    company_name = serializers.CharField(allow_blank=True, trim_whitespace=True)
    vehicle_id = serializers.IntegerField(min_value=1)
    city = serializers.CharField(
        max_length=100,
        required=False,
        allow_blank=True,
        default='',
    )
    tenure_years = serializers.IntegerField(help_text="Lease tenure in years (1-10).")
    vehicle_price = serializers.DecimalField(max_digits=15, decimal_places=2)
    down_payment_percent = serializers.DecimalField(
        max_digits=7,
        decimal_places=4,
        required=False,
        allow_null=True,
        default=None,
        help_text="Omit for full financing.",
    )
    registration_charges = _money()
    monthly_km = serializers.DecimalField(max_digits=10, decimal_places=2)
    daily_hours = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        required=False,
        default=Decimal('0'),
    )
    drivers_count = serializers.IntegerField(required=False, default=0)
    driver_salary_per_driver = _money()
    parking_charges = _money()
    supervisor_cost = _money()
    gps_camera_cost = _money()
    permit_cost = _money()
    maintenance_cost = _money(
        allow_null=True,
        default=None,
        help_text="Used when maintenance is a flat monthly amount.",
    )

    def to_input(self) -> CostSheetInput:
        return CostSheetInput.from_dict(self.validated_data)


class CreateCostSheetSerializer(CostSheetInputSerializer):
    """Serializer for cost sheet creation request."""

    submit = serializers.BooleanField(
        required=False,
        default=False,
        help_text="Submit for approval immediately.",
    )


class UpdateCostSheetSerializer(CostSheetInputSerializer):
    """Serializer for the edit request."""

    expected_version = serializers.IntegerField(min_value=1, required=False)


class DecisionSerializer(serializers.Serializer):
    """Serializer for submit, approve and reject requests."""

    remarks = serializers.CharField(
        required=False,
        allow_blank=True,
        default='',
        help_text="Required when rejecting.",
    )
    expected_version = serializers.IntegerField(min_value=1, required=False)


class CostSheetListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=CostSheetStatus.choices,
        required=False,
        allow_blank=True,
    )


class CostSheetSerializer(serializers.ModelSerializer):
    """Serializer for displaying a stored cost sheet."""

    vehicle_id = serializers.IntegerField(read_only=True)
    vehicle_name = serializers.CharField(source='vehicle.display_name', read_only=True)
    fuel_type = serializers.CharField(source='vehicle.fuel_type', read_only=True)
    created_by_name = serializers.SerializerMethodField()
    allowed_events = serializers.SerializerMethodField()

    class Meta:
        model = CostSheet
        exclude = ('vehicle',)
        read_only_fields = [f.name for f in CostSheet._meta.fields if f.name != 'vehicle']

    def get_created_by_name(self, obj):
        user = obj.created_by
        return user.get_full_name() or user.get_username()

    def get_allowed_events(self, obj):
        request = self.context.get('request')
        if request is None or not request.user.is_authenticated:
            return []
        return workflow.allowed_events(obj, actor_for_user(request.user))


class CostSheetListItemSerializer(serializers.ModelSerializer):
    """Serializer for one row of the cost sheet list."""

    vehicle_name = serializers.CharField(source='vehicle.display_name', read_only=True)

    class Meta:
        model = CostSheet
        fields = (
            'id', 'company_name', 'vehicle_name', 'city', 'tenure_years',
            'grand_total', 'status', 'version', 'created_by', 'created_at',
            'submitted_at', 'approved_at',
        )
        read_only_fields = fields


class DerivedFieldsSerializer(serializers.Serializer):
    tenure_months = serializers.IntegerField()
    interest_rate_percent = serializers.DecimalField(max_digits=7, decimal_places=4)
    insurance_rate_percent = serializers.DecimalField(max_digits=7, decimal_places=4)
    insurance_amount_annual = serializers.DecimalField(max_digits=15, decimal_places=2)
    insurance_amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    on_road_price = serializers.DecimalField(max_digits=15, decimal_places=2)
    down_payment_amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    loan_amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    emi_amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    subtotal_a = serializers.DecimalField(max_digits=15, decimal_places=2)
    fuel_rate = serializers.DecimalField(max_digits=10, decimal_places=4)
    fuel_cost = serializers.DecimalField(max_digits=15, decimal_places=2)
    maintenance_cost = serializers.DecimalField(max_digits=15, decimal_places=2)
    total_driver_cost = serializers.DecimalField(max_digits=15, decimal_places=2)
    subtotal_b = serializers.DecimalField(max_digits=15, decimal_places=2)
    admin_charge_percent = serializers.DecimalField(max_digits=7, decimal_places=4)
    admin_charge_amount = serializers.DecimalField(max_digits=15, decimal_places=2)
    grand_total = serializers.DecimalField(max_digits=15, decimal_places=2)


class PreviewResponseSerializer(serializers.Serializer):
    """Serializer for the live recalculation response."""

    derived = DerivedFieldsSerializer()
    rates = ResolvedRatesSerializer()


class CostSheetExportSerializer(serializers.ModelSerializer):
    """
    Read-only snapshot of an approved sheet for document generation.

    Only stored values are exposed; nothing is recalculated.
    """

    vehicle = serializers.SerializerMethodField()
    prepared_by = serializers.SerializerMethodField()
    approved_by = serializers.SerializerMethodField()

    class Meta:
        model = CostSheet
        fields = (
            'id', 'company_name', 'city', 'vehicle', 'tenure_years', 'tenure_months',
            'vehicle_price', 'registration_charges', 'down_payment_percent',
            'monthly_km', 'daily_hours', 'drivers_count', 'driver_salary_per_driver',
            'rates_as_of', 'interest_rate_percent', 'insurance_rate_percent',
            'admin_charge_percent', 'fuel_rate',
            'insurance_amount_annual', 'insurance_amount', 'on_road_price',
            'down_payment_amount', 'loan_amount', 'emi_amount', 'subtotal_a',
            'fuel_cost', 'maintenance_cost', 'total_driver_cost', 'parking_charges',
            'supervisor_cost', 'gps_camera_cost', 'permit_cost', 'subtotal_b',
            'admin_charge_amount', 'grand_total',
            'status', 'approval_remarks', 'approved_at', 'approved_by', 'prepared_by',
            'version',
        )
        read_only_fields = fields

    def get_vehicle(self, obj):
        return {
            'id': obj.vehicle_id,
            'brand': obj.vehicle.brand,
            'model': obj.vehicle.model,
            'variant': obj.vehicle.variant,
            'fuel_type': obj.vehicle.fuel_type,
        }

    def get_prepared_by(self, obj):
        return obj.created_by.get_full_name() or obj.created_by.get_username()

    def get_approved_by(self, obj):
        if obj.approved_by is None:
            return None
        return obj.approved_by.get_full_name() or obj.approved_by.get_username()


class MonthlyTrendSerializer(serializers.Serializer):
    month = serializers.DateField()
    created = serializers.IntegerField()
    approved = serializers.IntegerField()


class DashboardSerializer(serializers.Serializer):
    """Serializer for dashboard summary response."""

    total = serializers.IntegerField()
    draft = serializers.IntegerField()
    pending = serializers.IntegerField()
    approved = serializers.IntegerField()
    rejected = serializers.IntegerField()
    approved_value = serializers.DecimalField(max_digits=18, decimal_places=2)
    approved_average = serializers.DecimalField(max_digits=15, decimal_places=2)
    active_vehicles = serializers.IntegerField()
    monthly_trend = MonthlyTrendSerializer(many=True)
