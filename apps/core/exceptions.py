"""
Custom exceptions and DRF exception handler for the Fleet Cost Sheet System.
"""

import logging

from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class CostSheetValidationError(ValidationError):
    """Raised when cost sheet or workflow input is malformed or out of range."""

    default_detail = 'Invalid cost sheet input.'
    default_code = 'invalid_cost_sheet'


class InvalidTransitionError(APIException):
    """Raised when a status change is not allowed from the current state."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Invalid status transition.'
    default_code = 'invalid_transition'


class InsufficientPrivilegeError(InvalidTransitionError):
    """Raised when the actor lacks the capability a transition requires."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Insufficient privilege for this action.'
    default_code = 'insufficient_privilege'


class ConcurrencyConflictError(APIException):
    """Raised when a record changed since the caller last read it."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The record was modified by another user. Reload and retry.'
    default_code = 'concurrency_conflict'


class CostSheetNotApprovedError(APIException):
    """Raised when an approved-only operation targets an unapproved sheet."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Cost sheet is not approved.'
    default_code = 'cost_sheet_not_approved'


class VehicleNotFoundError(APIException):
    """Raised when a vehicle does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Vehicle not found.'
    default_code = 'vehicle_not_found'


class CostSheetNotFoundError(APIException):
    """Raised when a cost sheet does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Cost sheet not found.'
    default_code = 'cost_sheet_not_found'


class RateNotFoundError(APIException):
    """Raised when a rate record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Rate record not found.'
    default_code = 'rate_not_found'


class RateNotInEffectError(APIException):
    """Raised when activating a rate that is not the one in effect today."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Rate record is not in effect.'
    default_code = 'rate_not_in_effect'


class DataIngestionError(Exception):
    """Raised when data ingestion fails."""

    pass


def custom_exception_handler(exc, context):
    """
    Custom DRF exception handler that returns consistent error responses.

    Handles all DRF exceptions and adds logging for server errors.
    """
    response = exception_handler(exc, context)

    if response is not None:
        error_data = {
            'error': True,
            'status_code': response.status_code,
            'code': getattr(exc, 'default_code', None),
            'detail': response.data,
        }
        response.data = error_data
    else:
        # Unhandled exceptions: log and return 500
        logger.exception(
            "Unhandled exception in %s",
            context.get('view', 'unknown'),
            exc_info=exc,
        )
        response = Response(
            {
                'error': True,
                'status_code': 500,
                'detail': 'An unexpected error occurred. Please try again later.',
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return response
