"""
Business handlers for YooKassa notifications.

views.py owns security, idempotency and logging; this module decides what
a notification means for subscriptions. The notification body is never
trusted: the payment is fetched again from YooKassa and its current state
is used.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from apps.billing import services
from apps.billing.gateway import get_gateway

logger = logging.getLogger(__name__)


def handle_yookassa_event(*, event_type: str, payment_id: str) -> bool:
    """
    Route a notification. Returns False when the event is ignored.

    Events:
    - payment.succeeded: activate the pending subscription of the payment
    - payment.canceled:  drop the pending subscription of the payment
    """
    handlers = {
        "payment.succeeded": _handle_payment_succeeded,
        "payment.canceled": _handle_payment_canceled,
    }

    handler = handlers.get(event_type)
    if not handler:
        logger.info("Unhandled YooKassa webhook event: %s", event_type)
        return False

    payment = get_gateway().find_payment(payment_id)
    if payment is None:
        logger.warning("Webhook for unknown payment: event=%s payment_id=%s", event_type, payment_id)
        return False

    return handler(payment)


def _handle_payment_succeeded(payment: Dict[str, Any]) -> bool:
    if payment["status"] != "succeeded":
        logger.warning(
            "payment.succeeded but provider reports status=%s payment_id=%s",
            payment["status"], payment["id"],
        )
        return False
    return services.activate_pending_subscription(payment) is not None


def _handle_payment_canceled(payment: Dict[str, Any]) -> bool:
    if payment["status"] != "canceled":
        logger.warning(
            "payment.canceled but provider reports status=%s payment_id=%s",
            payment["status"], payment["id"],
        )
        return False
    return services.discard_pending_subscription(payment) is not None
