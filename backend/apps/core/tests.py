"""
Tests for core exceptions and the DRF exception handler.
"""

from datetime import timedelta
from types import SimpleNamespace

from django.test import SimpleTestCase
from django.utils import timezone
from rest_framework import exceptions

from .exception_handler import custom_exception_handler
from .exceptions import (
    BusinessLogicError,
    ExternalServiceError,
    InvalidStateError,
    InvoiceNotFoundError,
    NotFoundError,
    PaymentServiceError,
    PermissionDeniedError,
    SubscriptionNotFoundError,
    TeamPayException,
    UserSuspendedError,
    ValidationError,
)


class ExceptionsTestCase(SimpleTestCase):
    """Tests for custom exception classes."""

    def test_base_exception_default_values(self):
        """Test TeamPayException with default values."""
        exc = TeamPayException()
        self.assertEqual(exc.message, "An error occurred")
        self.assertEqual(exc.code, "error")
        self.assertEqual(exc.details, {})

    def test_base_exception_custom_values(self):
        exc = TeamPayException(
            message="Custom error",
            code="custom_code",
            details={"key": "value"}
        )
        self.assertEqual(exc.message, "Custom error")
        self.assertEqual(exc.code, "custom_code")
        self.assertEqual(exc.details, {"key": "value"})

    def test_exception_to_dict(self):
        exc = TeamPayException(
            message="Test error",
            code="test_error",
            details={"field": "name"}
        )
        self.assertEqual(exc.to_dict(), {
            "error": "test_error",
            "message": "Test error",
            "details": {"field": "name"},
        })

    def test_not_found_defaults(self):
        self.assertEqual(SubscriptionNotFoundError().code, "subscription_not_found")
        self.assertEqual(InvoiceNotFoundError().code, "invoice_not_found")

    def test_user_suspended_error_carries_suspension_fields(self):
        suspended_to = timezone.now() + timedelta(days=1)
        profile = SimpleNamespace(
            suspended_at=None,
            suspended_to=suspended_to,
            suspended_reason="Chargeback",
        )
        exc = UserSuspendedError(profile)

        self.assertEqual(exc.code, "account_suspended")
        self.assertEqual(exc.extra_payload(), {
            "suspended_at": None,
            "suspended_to": suspended_to.isoformat(),
            "suspended_reason": "Chargeback",
        })

    def test_exception_inheritance(self):
        self.assertTrue(issubclass(ValidationError, TeamPayException))
        self.assertTrue(issubclass(InvoiceNotFoundError, NotFoundError))
        self.assertTrue(issubclass(UserSuspendedError, PermissionDeniedError))
        self.assertTrue(issubclass(InvalidStateError, BusinessLogicError))
        self.assertTrue(issubclass(PaymentServiceError, ExternalServiceError))


class ExceptionHandlerTestCase(SimpleTestCase):
    """Tests for custom_exception_handler response format."""

    def test_drf_validation_error_becomes_422_with_field_details(self):
        exc = exceptions.ValidationError({"plan": ["Unavailable plan."]})

        response = custom_exception_handler(exc, {})

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.data["error"]["code"], "VALIDATION_ERROR")
        self.assertEqual(response.data["error"]["details"], {"plan": ["Unavailable plan."]})
        self.assertEqual(response.data["error"]["message"], "plan: Unavailable plan.")

    def test_drf_detail_error_keeps_status(self):
        response = custom_exception_handler(exceptions.PermissionDenied("Nope"), {})

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["error"]["code"], "FORBIDDEN")
        self.assertEqual(response.data["error"]["message"], "Nope")

    def test_domain_errors_map_to_status_codes(self):
        cases = [
            (ValidationError(details={"current": ["Wrong password."]}), 422),
            (SubscriptionNotFoundError(), 404),
            (PermissionDeniedError(), 403),
            (InvalidStateError(), 409),
            (PaymentServiceError(), 502),
            (TeamPayException(), 500),
        ]
        for exc, expected in cases:
            with self.subTest(exc=exc.__class__.__name__):
                response = custom_exception_handler(exc, {})
                self.assertEqual(response.status_code, expected)
                self.assertEqual(response.data["error"]["code"], exc.code)

    def test_suspension_fields_are_top_level(self):
        profile = SimpleNamespace(
            suspended_at=None,
            suspended_to=timezone.now() + timedelta(hours=1),
            suspended_reason="Abuse",
        )

        response = custom_exception_handler(UserSuspendedError(profile), {})

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.data["suspended_reason"], "Abuse")
        self.assertIn("suspended_to", response.data)

    def test_unexpected_exception_returns_500(self):
        response = custom_exception_handler(RuntimeError("boom"), {"view": None})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data["error"]["code"], "INTERNAL_ERROR")
