"""
Base exception classes for TeamPay.

Hierarchy:
    TeamPayException (base)
    ├── ValidationError - input/data validation errors
    ├── NotFoundError - resource not found
    │   ├── SubscriptionNotFoundError
    │   └── InvoiceNotFoundError
    ├── PermissionDeniedError - access denied
    │   └── UserSuspendedError
    ├── BusinessLogicError - domain/business rule violations
    │   └── InvalidStateError
    └── ExternalServiceError - third-party service failures
        └── PaymentServiceError
"""


class TeamPayException(Exception):
    """Base exception for all TeamPay errors."""

    default_message = "An error occurred"
    default_code = "error"

    def __init__(self, message=None, code=None, details=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def extra_payload(self):
        """Top-level keys merged into the error response body."""
        return {}


# Validation errors
class ValidationError(TeamPayException):
    """Input or data validation failed. Details are keyed by field."""
    default_message = "Validation error"
    default_code = "validation_error"


# Not found errors
class NotFoundError(TeamPayException):
    """Requested resource not found."""
    default_message = "Resource not found"
    default_code = "not_found"


class SubscriptionNotFoundError(NotFoundError):
    """Team has no subscription to act on."""
    default_message = "Team has no subscription"
    default_code = "subscription_not_found"


class InvoiceNotFoundError(NotFoundError):
    """Invoice does not exist or belongs to another team."""
    default_message = "Invoice not found"
    default_code = "invoice_not_found"


# Permission errors
class PermissionDeniedError(TeamPayException):
    """Access to resource denied."""
    default_message = "Permission denied"
    default_code = "permission_denied"


class UserSuspendedError(PermissionDeniedError):
    """
    The account is suspended until `suspended_to`.

    The suspension fields are returned at the top level of the response body.
    """
    default_message = "Your account is suspended"
    default_code = "account_suspended"

    def __init__(self, profile, message=None):
        self.profile = profile
        super().__init__(message=message, details=self.suspension_fields(profile))

    @staticmethod
    def suspension_fields(profile):
        return {
            "suspended_at": profile.suspended_at.isoformat() if profile.suspended_at else None,
            "suspended_to": profile.suspended_to.isoformat() if profile.suspended_to else None,
            "suspended_reason": profile.suspended_reason,
        }

    def extra_payload(self):
        return dict(self.details)


# Business logic errors
class BusinessLogicError(TeamPayException):
    """Business rule violation."""
    default_message = "Business logic error"
    default_code = "business_error"


class InvalidStateError(BusinessLogicError):
    """Object is in invalid state for operation."""
    default_message = "Invalid state for this operation"
    default_code = "invalid_state"


# External service errors
class ExternalServiceError(TeamPayException):
    """External service failure."""
    default_message = "External service error"
    default_code = "external_service_error"


class PaymentServiceError(ExternalServiceError):
    """Payment provider rejected or failed the operation."""
    default_message = "Payment service error"
    default_code = "payment_service_error"
