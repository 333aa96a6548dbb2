"""
Custom exception handler for DRF.
Returns unified error format for all API exceptions.

Target format:
{
  "error": {
    "code": "ERROR_CODE",
    "message": "Human-readable message",
    "details": { ... }
  }
}

Validation errors are answered with 422 and keep the field-keyed messages
in "details", e.g. {"plan": ["Unavailable plan."]}.
"""

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.core.exceptions import (
    BusinessLogicError,
    ExternalServiceError,
    NotFoundError,
    PermissionDeniedError,
    TeamPayException,
    ValidationError,
)

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Custom exception handler for DRF.
    Returns unified error format for all exceptions.
    """
    # Let DRF handle its own exceptions first
    response = exception_handler(exc, context)

    if response is not None:
        if isinstance(exc, exceptions.ValidationError):
            response.status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
        # Convert DRF errors to unified format
        return _convert_drf_error(response, exc)

    # Handle our domain exceptions
    if isinstance(exc, TeamPayException):
        return _handle_domain_exception(exc)

    # Log unexpected exceptions
    view = context.get('view', None)
    view_name = view.__class__.__name__ if view else 'Unknown'
    logger.exception("[%s] Unhandled exception: %s", view_name, exc)

    return Response(
        {
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "Internal server error",
                "details": {}
            }
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def _convert_drf_error(response, exc):
    """Convert DRF error response to unified format."""
    data = response.data

    # Already in our format
    if isinstance(data, dict) and "error" in data and isinstance(data["error"], dict):
        return response

    if isinstance(data, dict):
        # DRF detail errors: { "detail": "message" }
        if set(data.keys()) == {"detail"}:
            response.data = {
                "error": {
                    "code": _status_to_code(response.status_code),
                    "message": str(data["detail"]),
                    "details": {}
                }
            }
            return response

        # Field validation errors: { "field": ["error1", "error2"] }
        first_error = None
        for field, errors in data.items():
            if isinstance(errors, list) and errors:
                first_error = f"{field}: {errors[0]}"
                break
            if isinstance(errors, str):
                first_error = f"{field}: {errors}"
                break

        response.data = {
            "error": {
                "code": "VALIDATION_ERROR",
                "message": first_error or "The given data was invalid.",
                "details": data
            }
        }
        return response

    # List of errors (rare case)
    if isinstance(data, list):
        response.data = {
            "error": {
                "code": "VALIDATION_ERROR",
                "message": str(data[0]) if data else "The given data was invalid.",
                "details": {"non_field_errors": data}
            }
        }
        return response

    return response


def _handle_domain_exception(exc: TeamPayException):
    """Handle TeamPayException subclasses."""
    status_code = _get_status_code(exc)

    if isinstance(exc, ExternalServiceError):
        logger.error("External service failure: code=%s message=%s", exc.code, exc.message)

    body = {
        "error": {
            "code": exc.code,
            "message": exc.message,
            "details": exc.details
        }
    }
    body.update(exc.extra_payload())
    return Response(body, status=status_code)


def _get_status_code(exc: TeamPayException) -> int:
    """Map exception type to HTTP status code."""
    if isinstance(exc, ValidationError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, PermissionDeniedError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, BusinessLogicError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, ExternalServiceError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _status_to_code(status_code: int) -> str:
    """Map HTTP status code to error code."""
    mapping = {
        400: "BAD_REQUEST",
        401: "UNAUTHORIZED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        409: "CONFLICT",
        422: "VALIDATION_ERROR",
        429: "TOO_MANY_REQUESTS",
        500: "INTERNAL_ERROR",
        502: "BAD_GATEWAY",
        503: "SERVICE_UNAVAILABLE",
    }
    return mapping.get(status_code, "ERROR")
