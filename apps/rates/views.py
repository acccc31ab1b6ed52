"""
Rate views for the Fleet Cost Sheet System.

Views are thin: all business logic is in the service layer.
"""

import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import Capability, HasCapability
from apps.rates.serializers import (
    CreateRateSerializer,
    CurrentRatesQuerySerializer,
    RateRecordSerializer,
    ResolvedRatesSerializer,
)
from apps.rates.services import RateService

logger = logging.getLogger(__name__)


class RateListView(APIView):
    """
    GET  /api/rates
    POST /api/rates

    Rate history (filter with ?kind=), or record a new rate.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = Capability.MANAGE_RATES

    def get(self, request):
        records = RateService.history(
            kind=request.query_params.get('kind'),
            fuel_type=request.query_params.get('fuel_type'),
            city=request.query_params.get('city'),
        )
        return Response(
            RateRecordSerializer(records, many=True).data,
            status=status.HTTP_200_OK,
        )

    def post(self, request):
        """Handle rate creation."""
        serializer = CreateRateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        record = RateService.create_rate(
            kind=data['kind'],
            value=data['value'],
            effective_from=data['effective_from'],
            fuel_type=data['fuel_type'],
            city=data['city'],
            created_by=request.user,
        )

        return Response(
            RateRecordSerializer(record).data,
            status=status.HTTP_201_CREATED,
        )


class ActivateRateView(APIView):
    """
    POST /api/rates/<rate_id>/activate

    Confirm a record as the active one for its key. Only the record in
    effect today can be active; anything else is a 409.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = Capability.MANAGE_RATES

    def post(self, request, rate_id):
        record = RateService.activate(rate_id)
        return Response(
            RateRecordSerializer(record).data,
            status=status.HTTP_200_OK,
        )


class CurrentRatesView(APIView):
    """
    GET /api/rates/current?as_of=&fuel_type=&city=

    Rates in effect on a date (today by default).
    """

    def get(self, request):
        query = CurrentRatesQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        as_of = query.validated_data.get('as_of') or timezone.localdate()

        rates = RateService.resolve_all(
            as_of=as_of,
            fuel_type=query.validated_data['fuel_type'],
            city=query.validated_data['city'],
        )

        return Response(
            ResolvedRatesSerializer(RateService.describe(rates, as_of)).data,
            status=status.HTTP_200_OK,
        )
