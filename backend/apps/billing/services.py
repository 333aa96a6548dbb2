"""
billing/services.py

Business layer for team subscriptions.

Views and commands call these functions; they own the subscription state
machine and every call to the payment provider (through
apps.billing.gateway).

States:
    pending    first charge waits for 3-D Secure (webhook finishes it)
    active     paid and running; renewed by `renew_subscriptions`
    cancelled  not renewed; valid until `ends_at` (grace period)
    expired    finished; does not count as the team's subscription

Key rules:
- a team has at most one subscription that is not expired
  (DB constraint + row locks inside transaction.atomic)
- amounts always come from SubscriptionPlan, never from the client
- the free plan is never charged; choosing it cancels a paid subscription
- a swap waiting for 3-D Secure keeps the old plan (pending_plan holds the new
  one) until the webhook confirms it; a second change is refused meanwhile
"""

from __future__ import annotations

from datetime import timedelta
import logging
from typing import Any, Dict, List, NamedTuple, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import (
    InvalidStateError,
    InvoiceNotFoundError,
    PaymentServiceError,
    SubscriptionNotFoundError,
    ValidationError,
)
from apps.teams.models import Team

from .gateway import get_gateway
from .models import Coupon, Subscription, SubscriptionPlan
from .signals import (
    subscription_cancelled,
    subscription_created,
    subscription_resumed,
    subscription_swapped,
)

logger = logging.getLogger(__name__)

ACTION_CREATED = 'created'
ACTION_SWAPPED = 'swapped'
ACTION_CANCELLED = 'cancelled'
ACTION_UNCHANGED = 'unchanged'
# Swap charged, waiting for 3-D Secure; the webhook completes it
ACTION_SWAP_PENDING = 'swap_pending'

INVOICE_PRODUCT = "Membership Subscription"


class SubscriptionChange(NamedTuple):
    action: str
    subscription: Optional[Subscription]
    confirmation_url: Optional[str] = None


# ---------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------

def get_active_plans():
    return SubscriptionPlan.objects.filter(is_active=True).order_by('price')


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def _lock_current_subscription(team: Team) -> Optional[Subscription]:
    """
    Lock the team row and return its live subscription (locked too).

    Locking the team serializes transitions even when no subscription row
    exists yet.
    """
    Team.all_objects.select_for_update().get(pk=team.pk)
    return (
        Subscription.objects
        .select_for_update()
        .select_related('plan')
        .filter(team=team)
        .exclude(status=Subscription.STATUS_EXPIRED)
        .first()
    )


def _is_paid_and_valid(subscription: Optional[Subscription]) -> bool:
    return (
        subscription is not None
        and subscription.is_valid()
        and not subscription.plan.is_free
    )


def _charge_metadata(team: Team, plan: SubscriptionPlan, kind: str) -> Dict[str, Any]:
    return {
        "team_id": team.id,
        "team_slug": team.slug,
        "plan_code": plan.code,
        "kind": kind,
    }


def _charge_description(team: Team, plan: SubscriptionPlan) -> str:
    return f"{plan.display_name} subscription for {team.name}"[:128]


def _pending_cutoff(now=None):
    """Payments still unconfirmed before this moment are given up on."""
    return (now or timezone.now()) - timedelta(hours=settings.BILLING_PENDING_TTL_HOURS)


def _expire(subscription: Subscription, now=None) -> None:
    subscription.status = Subscription.STATUS_EXPIRED
    subscription.auto_renew = False
    subscription.ends_at = now or timezone.now()
    subscription.save(update_fields=['status', 'auto_renew', 'ends_at', 'updated_at'])


def _start_grace_period(subscription: Subscription, now=None) -> None:
    now = now or timezone.now()
    subscription.status = Subscription.STATUS_CANCELLED
    subscription.auto_renew = False
    subscription.ends_at = subscription.current_period_end or now
    subscription.save(update_fields=['status', 'auto_renew', 'ends_at', 'updated_at'])


# ---------------------------------------------------------------------
# Subscribe: free / swap / create
# ---------------------------------------------------------------------

def subscribe_team(
    *,
    team: Team,
    plan: SubscriptionPlan,
    nonce: Optional[str] = None,
    coupon: Optional[Coupon] = None,
) -> SubscriptionChange:
    """
    Move the team to `plan`.

    - free plan: cancel the paid subscription, if there is one
    - team already subscribed: swap the plan on the saved payment method
    - otherwise: create a subscription charged with the payment token `nonce`

    Scope and team-admin checks are done by the caller.
    """
    with transaction.atomic():
        current = _lock_current_subscription(team)

        if plan.is_free:
            if not _is_paid_and_valid(current) or current.status != Subscription.STATUS_ACTIVE:
                # Nothing paid, or already cancelled and running out
                return SubscriptionChange(ACTION_UNCHANGED, current)
            _start_grace_period(current)
            change = SubscriptionChange(ACTION_CANCELLED, current)

        elif _is_paid_and_valid(current):
            change = _swap(team, current, plan, nonce=nonce)

        else:
            if current is not None:
                if (current.status == Subscription.STATUS_PENDING
                        and current.created_at > _pending_cutoff()):
                    # Its payment may still succeed
                    raise InvalidStateError("The first payment is still being confirmed.")
                # Stale pending charge or a free-plan row: replaced by the new one
                _expire(current)
            change = _create(team, plan, nonce=nonce, coupon=coupon)

    _announce(team, change)
    return change


def _create(team: Team, plan: SubscriptionPlan, *, nonce, coupon) -> SubscriptionChange:
    if not nonce:
        raise ValidationError(
            "A payment method is required.",
            details={"nonce": ["A payment method is required."]},
        )

    subscription = Subscription(team=team, plan=plan, coupon=coupon)
    amount = coupon.apply(plan.price) if coupon else plan.price

    if amount <= 0:
        # Fully discounted: nothing to charge
        subscription.status = Subscription.STATUS_ACTIVE
        subscription.start_period()
        subscription.save()
        logger.info("Subscription created without charge: team_id=%s plan=%s", team.id, plan.code)
        return SubscriptionChange(ACTION_CREATED, subscription)

    result = get_gateway().charge_with_token(
        amount=amount,
        currency=plan.currency,
        payment_token=nonce,
        description=_charge_description(team, plan),
        metadata=_charge_metadata(team, plan, "subscription_create"),
    )

    if result["status"] == "canceled":
        logger.warning(
            "First charge declined: team_id=%s plan=%s payment_id=%s",
            team.id, plan.code, result["id"],
        )
        raise PaymentServiceError("The payment was declined.")

    subscription.provider_id = result["id"]
    if result.get("payment_method_saved") and result.get("payment_method_id"):
        subscription.payment_method_id = result["payment_method_id"]

    if result["status"] == "succeeded":
        subscription.status = Subscription.STATUS_ACTIVE
        subscription.start_period()
    else:
        subscription.status = Subscription.STATUS_PENDING

    subscription.save()

    logger.info(
        "Subscription created: team_id=%s plan=%s status=%s payment_id=%s",
        team.id, plan.code, subscription.status, subscription.provider_id,
    )
    return SubscriptionChange(ACTION_CREATED, subscription, result.get("confirmation_url"))


def _swap(team: Team, subscription: Subscription, plan: SubscriptionPlan, *, nonce) -> SubscriptionChange:
    if subscription.plan_id == plan.id:
        if subscription.on_grace_period():
            _resume(subscription)
            return SubscriptionChange(ACTION_SWAPPED, subscription)
        return SubscriptionChange(ACTION_UNCHANGED, subscription)

    if subscription.has_pending_swap():
        if subscription.pending_since and subscription.pending_since > _pending_cutoff():
            raise InvalidStateError("A plan change is still being confirmed.")
        subscription.clear_pending_swap()

    if subscription.payment_method_id:
        result = get_gateway().charge_saved_method(
            amount=plan.price,
            currency=plan.currency,
            payment_method_id=subscription.payment_method_id,
            description=_charge_description(team, plan),
            metadata=_charge_metadata(team, plan, "subscription_swap"),
        )
    elif nonce:
        result = get_gateway().charge_with_token(
            amount=plan.price,
            currency=plan.currency,
            payment_token=nonce,
            description=_charge_description(team, plan),
            metadata=_charge_metadata(team, plan, "subscription_swap"),
        )
        if result.get("payment_method_saved") and result.get("payment_method_id"):
            subscription.payment_method_id = result["payment_method_id"]
    else:
        raise ValidationError(
            "A payment method is required.",
            details={"nonce": ["A payment method is required."]},
        )

    if result["status"] == "canceled":
        logger.warning(
            "Swap charge declined: team_id=%s plan=%s payment_id=%s",
            team.id, plan.code, result["id"],
        )
        raise PaymentServiceError("The plan change could not be charged.")

    if result["status"] != "succeeded":
        # Keep the current plan until payment.succeeded arrives
        subscription.pending_plan = plan
        subscription.pending_provider_id = result["id"]
        subscription.pending_since = timezone.now()
        subscription.save()
        logger.info(
            "Swap waiting for confirmation: team_id=%s plan=%s payment_id=%s status=%s",
            team.id, plan.code, result["id"], result["status"],
        )
        return SubscriptionChange(ACTION_SWAP_PENDING, subscription, result.get("confirmation_url"))

    old_plan = subscription.plan.code
    _apply_swap(subscription, plan, result["id"])

    logger.info(
        "Subscription swapped: team_id=%s %s -> %s payment_id=%s",
        team.id, old_plan, plan.code, result["id"],
    )
    return SubscriptionChange(ACTION_SWAPPED, subscription)


def _apply_swap(subscription: Subscription, plan: SubscriptionPlan, payment_id: str) -> None:
    subscription.plan = plan
    subscription.provider_id = payment_id
    subscription.status = Subscription.STATUS_ACTIVE
    subscription.auto_renew = True
    subscription.ends_at = None
    subscription.clear_pending_swap()
    subscription.start_period()
    subscription.save()


def _announce(team: Team, change: SubscriptionChange) -> None:
    signal = {
        ACTION_CREATED: subscription_created,
        ACTION_SWAPPED: subscription_swapped,
        ACTION_CANCELLED: subscription_cancelled,
    }.get(change.action)
    if signal is not None:
        signal.send(sender=Subscription, team=team, subscription=change.subscription)


# ---------------------------------------------------------------------
# Cancel / resume
# ---------------------------------------------------------------------

def cancel_subscription(team: Team) -> Subscription:
    """
    Stop renewals. An active subscription stays valid until the end of the
    paid period; a pending one is dropped at once.
    """
    with transaction.atomic():
        subscription = _lock_current_subscription(team)
        if subscription is None:
            raise SubscriptionNotFoundError()

        if subscription.status == Subscription.STATUS_CANCELLED:
            raise InvalidStateError("The subscription is already cancelled.")

        if subscription.status == Subscription.STATUS_PENDING:
            _expire(subscription)
        else:
            _start_grace_period(subscription)

    logger.info(
        "Subscription cancelled: team_id=%s subscription_id=%s ends_at=%s",
        team.id, subscription.id, subscription.ends_at,
    )
    subscription_cancelled.send(sender=Subscription, team=team, subscription=subscription)
    return subscription


def cancel_team_billing(team: Team) -> Optional[Subscription]:
    """Cancel the team's active subscription, if any (team deletion)."""
    subscription = team.current_subscription()
    if subscription is None or subscription.status != Subscription.STATUS_ACTIVE:
        return None
    return cancel_subscription(team)


def _resume(subscription: Subscription) -> None:
    subscription.status = Subscription.STATUS_ACTIVE
    subscription.auto_renew = True
    subscription.ends_at = None
    subscription.save(update_fields=['status', 'auto_renew', 'ends_at', 'updated_at'])


def resume_subscription(team: Team) -> Subscription:
    """Undo a cancellation while the grace period lasts."""
    with transaction.atomic():
        subscription = _lock_current_subscription(team)
        if subscription is None:
            raise SubscriptionNotFoundError()

        if not subscription.on_grace_period():
            raise InvalidStateError("Only a cancelled subscription on its grace period can be resumed.")

        _resume(subscription)

    logger.info("Subscription resumed: team_id=%s subscription_id=%s", team.id, subscription.id)
    subscription_resumed.send(sender=Subscription, team=team, subscription=subscription)
    return subscription


# ---------------------------------------------------------------------
# Invoices (YooKassa payments, not stored locally)
# ---------------------------------------------------------------------

def _to_invoice(payment: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": payment["id"],
        "status": payment["status"],
        "total": payment["amount"],
        "currency": payment["currency"],
        "created_at": payment["created_at"],
        "description": payment["description"],
    }


def list_team_invoices(team: Team) -> List[Dict[str, Any]]:
    """Succeeded charges of the team, newest first."""
    if not team.has_payment_method():
        return []

    return [
        _to_invoice(payment)
        for payment in get_gateway().list_team_payments(team.id)
        if payment["status"] == "succeeded"
    ]


def get_team_invoice(team: Team, invoice_id: str) -> Dict[str, Any]:
    payment = get_gateway().find_payment(invoice_id)
    if payment is None or str(payment["metadata"].get("team_id")) != str(team.id):
        raise InvoiceNotFoundError()

    invoice = _to_invoice(payment)
    invoice["vendor"] = settings.BILLING_VENDOR_NAME
    invoice["product"] = INVOICE_PRODUCT
    invoice["team"] = {"id": team.id, "name": team.name}
    return invoice


# ---------------------------------------------------------------------
# Webhook: finish pending charges (first charge or plan swap)
# ---------------------------------------------------------------------

def activate_pending_subscription(payment: Dict[str, Any]) -> Optional[Subscription]:
    """
    payment.succeeded: a pending first charge becomes active, a pending
    swap moves the subscription to its new plan.

    Repeated notifications are no-ops.
    """
    with transaction.atomic():
        subscription = (
            Subscription.objects
            .select_for_update()
            .select_related('plan', 'team')
            .filter(provider_id=payment["id"])
            .first()
        )
        if subscription is None:
            return _complete_pending_swap(payment)

        if subscription.status != Subscription.STATUS_PENDING:
            return subscription

        subscription.status = Subscription.STATUS_ACTIVE
        if payment.get("payment_method_saved") and payment.get("payment_method_id"):
            subscription.payment_method_id = payment["payment_method_id"]
        subscription.start_period()
        subscription.save()

    logger.info(
        "Pending subscription activated: subscription_id=%s payment_id=%s",
        subscription.id, payment["id"],
    )
    return subscription


def _complete_pending_swap(payment: Dict[str, Any]) -> Optional[Subscription]:
    with transaction.atomic():
        subscription = (
            Subscription.objects
            .select_for_update()
            .select_related('plan', 'team', 'pending_plan')
            .filter(pending_provider_id=payment["id"])
            .exclude(status=Subscription.STATUS_EXPIRED)
            .first()
        )
        if subscription is None or subscription.pending_plan is None:
            logger.info("No subscription for payment_id=%s", payment["id"])
            return None

        old_plan = subscription.plan.code
        if payment.get("payment_method_saved") and payment.get("payment_method_id"):
            subscription.payment_method_id = payment["payment_method_id"]
        _apply_swap(subscription, subscription.pending_plan, payment["id"])

    logger.info(
        "Pending swap completed: team_id=%s %s -> %s payment_id=%s",
        subscription.team_id, old_plan, subscription.plan.code, payment["id"],
    )
    subscription_swapped.send(sender=Subscription, team=subscription.team, subscription=subscription)
    return subscription


def discard_pending_subscription(payment: Dict[str, Any]) -> Optional[Subscription]:
    """
    payment.canceled: a pending first charge expires, a pending swap is
    dropped and the current plan stays.
    """
    with transaction.atomic():
        subscription = (
            Subscription.objects
            .select_for_update()
            .filter(provider_id=payment["id"], status=Subscription.STATUS_PENDING)
            .first()
        )
        if subscription is not None:
            _expire(subscription)
        else:
            subscription = (
                Subscription.objects
                .select_for_update()
                .filter(pending_provider_id=payment["id"])
                .first()
            )
            if subscription is None:
                return None
            subscription.clear_pending_swap()
            subscription.save(update_fields=['pending_plan', 'pending_provider_id', 'pending_since', 'updated_at'])

    logger.info(
        "Pending charge discarded: subscription_id=%s payment_id=%s",
        subscription.id, payment["id"],
    )
    return subscription


# ---------------------------------------------------------------------
# Renewals and expiry (management commands)
# ---------------------------------------------------------------------

def renew_subscription(subscription_id: int, now=None) -> bool:
    """
    Charge one due subscription and extend its period.

    A failed charge cancels the subscription without a grace period.
    Returns True when renewed.
    """
    now = now or timezone.now()

    with transaction.atomic():
        subscription = (
            Subscription.objects
            .select_for_update()
            .select_related('plan', 'team')
            .get(pk=subscription_id)
        )
        if not subscription.is_due_for_renewal(now):
            return False

        team, plan = subscription.team, subscription.plan
        result = None
        if subscription.payment_method_id:
            try:
                result = get_gateway().charge_saved_method(
                    amount=plan.price,
                    currency=plan.currency,
                    payment_method_id=subscription.payment_method_id,
                    description=_charge_description(team, plan),
                    metadata=_charge_metadata(team, plan, "subscription_renewal"),
                )
            except PaymentServiceError as e:
                logger.warning("Renewal charge failed: subscription_id=%s error=%s", subscription.id, e)

        if result is not None and result["status"] == "succeeded":
            subscription.provider_id = result["id"]
            subscription.start_period(now)
            subscription.save()
            logger.info("Subscription renewed: subscription_id=%s until=%s",
                        subscription.id, subscription.current_period_end)
            return True

        subscription.status = Subscription.STATUS_CANCELLED
        subscription.auto_renew = False
        subscription.ends_at = now
        subscription.save(update_fields=['status', 'auto_renew', 'ends_at', 'updated_at'])

    logger.warning("Subscription cancelled after failed renewal: subscription_id=%s", subscription.id)
    subscription_cancelled.send(sender=Subscription, team=team, subscription=subscription)
    return False


def due_for_renewal(now=None):
    return Subscription.objects.filter(
        status=Subscription.STATUS_ACTIVE,
        auto_renew=True,
        current_period_end__lte=now or timezone.now(),
    ).order_by('current_period_end')


def ended_subscriptions(now=None):
    """Cancelled past their grace period, or pending for too long."""
    now = now or timezone.now()
    return Subscription.objects.filter(
        status=Subscription.STATUS_CANCELLED, ends_at__lte=now
    ) | Subscription.objects.filter(
        status=Subscription.STATUS_PENDING, created_at__lte=_pending_cutoff(now)
    )


def expire_ended_subscriptions(now=None) -> int:
    now = now or timezone.now()
    count = ended_subscriptions(now).update(
        status=Subscription.STATUS_EXPIRED,
        auto_renew=False,
        updated_at=now,
    )
    if count:
        logger.info("Expired %s subscriptions", count)

    abandoned = Subscription.objects.filter(pending_since__lte=_pending_cutoff(now)).update(
        pending_plan=None,
        pending_provider_id='',
        pending_since=None,
        updated_at=now,
    )
    if abandoned:
        logger.info("Dropped %s unconfirmed plan changes", abandoned)
    return count
