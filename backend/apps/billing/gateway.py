"""
billing/gateway.py

Thin wrapper over the official YooKassa SDK.

Every provider call of the billing app goes through YooKassaGateway, which
returns plain normalized dicts so the rest of the code never touches SDK
objects. Provider errors are logged here and re-raised as
PaymentServiceError (502).

The SDK keeps credentials in the global Configuration, so they are set
explicitly on construction and never logged.
"""

from __future__ import annotations

from decimal import Decimal
import logging
from typing import Any, Dict, Iterator, List, Optional
import uuid

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from yookassa import Configuration, Payment as YooKassaPayment
from yookassa.domain.exceptions.bad_request_error import BadRequestError as YooKassaBadRequestError
from yookassa.domain.exceptions.not_found_error import NotFoundError as YooKassaNotFoundError

from apps.core.exceptions import PaymentServiceError

logger = logging.getLogger(__name__)

# Payment.list page size (YooKassa allows up to 100)
LIST_PAGE_LIMIT = 100
LIST_MAX_PAGES = 10


def _normalize_payment(payment) -> Dict[str, Any]:
    confirmation = getattr(payment, "confirmation", None)
    payment_method = getattr(payment, "payment_method", None)
    return {
        "id": payment.id,
        "status": payment.status,
        "amount": Decimal(str(payment.amount.value)),
        "currency": payment.amount.currency,
        "description": getattr(payment, "description", None) or "",
        "created_at": payment.created_at,
        "paid": bool(getattr(payment, "paid", False)),
        "metadata": dict(getattr(payment, "metadata", None) or {}),
        "confirmation_url": getattr(confirmation, "confirmation_url", None) if confirmation else None,
        "payment_method_id": getattr(payment_method, "id", None) if payment_method else None,
        "payment_method_saved": bool(getattr(payment_method, "saved", False)) if payment_method else False,
    }


class YooKassaGateway:
    """
    YooKassa client for subscription charges and invoice lookups.
    """

    def __init__(self) -> None:
        self.shop_id = getattr(settings, "YOOKASSA_SHOP_ID", None)
        self.secret_key = getattr(settings, "YOOKASSA_SECRET_KEY", None)
        self.return_url = getattr(settings, "BILLING_RETURN_URL", "")

        if not self.shop_id or not self.secret_key:
            raise ImproperlyConfigured(
                "YooKassa credentials not configured. "
                "Set YOOKASSA_SHOP_ID and YOOKASSA_SECRET_KEY env vars."
            )

        if not str(self.shop_id).isdigit():
            raise ImproperlyConfigured(
                f"Invalid YOOKASSA_SHOP_ID format: {self.shop_id}. Must be numeric."
            )

        if not str(self.secret_key).startswith(("test_", "live_")):
            raise ImproperlyConfigured(
                "Invalid YOOKASSA_SECRET_KEY format. Must start with 'test_' or 'live_'."
            )

        Configuration.account_id = str(self.shop_id)
        Configuration.secret_key = str(self.secret_key)

    # -----------------------------------------------------------------
    # Charges
    # -----------------------------------------------------------------

    def charge_with_token(
        self,
        *,
        amount: Decimal,
        currency: str,
        payment_token: str,
        description: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        First charge of a new subscription.

        `payment_token` is the one-time token produced by the YooKassa
        checkout widget on the client. The payment method is saved for
        renewals and swaps. The result may be `pending` when the bank asks
        for 3-D Secure; `confirmation_url` is then set.
        """
        payload: Dict[str, Any] = {
            "amount": {"value": str(amount), "currency": currency},
            "payment_token": payment_token,
            "capture": True,
            "save_payment_method": True,
            "description": description,
            "metadata": metadata or {},
        }
        if self.return_url:
            payload["confirmation"] = {"type": "redirect", "return_url": self.return_url}

        return self._create(payload, operation="charge_with_token")

    def charge_saved_method(
        self,
        *,
        amount: Decimal,
        currency: str,
        payment_method_id: str,
        description: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Charge a saved payment method (plan swap, renewal)."""
        payload: Dict[str, Any] = {
            "amount": {"value": str(amount), "currency": currency},
            "capture": True,
            "payment_method_id": payment_method_id,
            "description": description,
            "metadata": metadata or {},
        }
        return self._create(payload, operation="charge_saved_method")

    def _create(self, payload: Dict[str, Any], *, operation: str) -> Dict[str, Any]:
        idempotence_key = str(uuid.uuid4())
        try:
            payment = YooKassaPayment.create(payload, idempotence_key)
        except Exception as e:
            logger.error("YooKassa %s error: %s", operation, str(e), exc_info=True)
            raise PaymentServiceError("The payment provider rejected the request.") from e

        result = _normalize_payment(payment)
        logger.info(
            "YooKassa %s: payment_id=%s status=%s amount=%s %s",
            operation, result["id"], result["status"], result["amount"], result["currency"],
        )
        return result

    # -----------------------------------------------------------------
    # Lookups
    # -----------------------------------------------------------------

    def find_payment(self, payment_id: str) -> Optional[Dict[str, Any]]:
        """Payment by id, or None when YooKassa does not know it (or the id is malformed)."""
        try:
            payment = YooKassaPayment.find_one(payment_id)
        except YooKassaNotFoundError:
            return None
        except YooKassaBadRequestError:
            logger.info("YooKassa rejected payment id as malformed: %r", payment_id)
            return None
        except Exception as e:
            logger.error("YooKassa find_payment error: %s", str(e), exc_info=True)
            raise PaymentServiceError("The payment provider is unavailable.") from e
        return _normalize_payment(payment)

    def iter_payments(self, **params) -> Iterator[Dict[str, Any]]:
        """Walk Payment.list pages (newest first) following next_cursor."""
        query = {"limit": LIST_PAGE_LIMIT, **params}
        for _ in range(LIST_MAX_PAGES):
            try:
                response = YooKassaPayment.list(query)
            except Exception as e:
                logger.error("YooKassa list_payments error: %s", str(e), exc_info=True)
                raise PaymentServiceError("The payment provider is unavailable.") from e

            for payment in response.items or []:
                yield _normalize_payment(payment)

            cursor = getattr(response, "next_cursor", None)
            if not cursor:
                return
            query = {"limit": LIST_PAGE_LIMIT, "cursor": cursor}

    def list_team_payments(self, team_id: int) -> List[Dict[str, Any]]:
        """
        Payments charged for a team.

        YooKassa cannot filter by metadata, so the filter runs here.
        """
        wanted = str(team_id)
        return [
            payment for payment in self.iter_payments()
            if str(payment["metadata"].get("team_id")) == wanted
        ]


def get_gateway() -> YooKassaGateway:
    return YooKassaGateway()
