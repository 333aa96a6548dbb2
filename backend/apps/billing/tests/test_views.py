"""
HTTP tests for plans, team subscriptions and invoices.
"""

from unittest.mock import patch

import pytest
from rest_framework import status

from apps.billing.models import Coupon, Subscription
from apps.billing.throttles import SubscriptionChangeThrottle


def subscription_url(team, action=""):
    return f"/api/v1/teams/{team.slug}/subscription/{action}"


def invoices_url(team, invoice_id=None):
    url = f"/api/v1/teams/{team.slug}/invoices/"
    return f"{url}{invoice_id}/" if invoice_id else url


@pytest.mark.django_db
class TestPlans:

    def test_public_active_plans(self, api_client, plans):
        response = api_client.get("/api/v1/billing/plans/")

        assert response.status_code == status.HTTP_200_OK
        assert [p["code"] for p in response.data] == ["free", "pro", "business"]
        assert response.data[1]["price"] == "990.00"


@pytest.mark.django_db
class TestSubscribe:

    def test_creates_subscription(self, auth_client, team, plans, gateway):
        response = auth_client.post(subscription_url(team), {"plan": "pro", "nonce": "tok-1"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["plan"] == "pro"
        assert response.data["status"] == "active"
        assert response.data["on_grace_period"] is False
        assert "confirmation_url" not in response.data

    def test_pending_returns_confirmation_url(self, auth_client, team, plans, gateway, make_payment):
        gateway.charge_with_token.return_value = make_payment(
            status="pending", confirmation_url="https://yoomoney.ru/3ds",
        )

        response = auth_client.post(subscription_url(team), {"plan": "pro", "nonce": "tok-1"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == "pending"
        assert response.data["confirmation_url"] == "https://yoomoney.ru/3ds"

    def test_swap_waiting_for_3ds_returns_confirmation_url(self, auth_client, team, plans, gateway, make_payment):
        Subscription.objects.create(team=team, plan=plans["pro"], status="active")
        gateway.charge_with_token.return_value = make_payment(
            payment_id="pay-3ds", status="pending", confirmation_url="https://yoomoney.ru/3ds",
        )

        response = auth_client.post(
            subscription_url(team), {"plan": "business", "nonce": "tok-3ds"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["plan"] == "pro"
        assert response.data["pending_plan"] == "business"
        assert response.data["confirmation_url"] == "https://yoomoney.ru/3ds"

    def test_subscribe_while_first_payment_pending_is_409(self, auth_client, team, plans, gateway):
        Subscription.objects.create(team=team, plan=plans["pro"], status="pending", provider_id="pay-0")

        response = auth_client.post(
            subscription_url(team), {"plan": "business", "nonce": "tok-2"}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        gateway.charge_with_token.assert_not_called()

    def test_unavailable_plan_is_422(self, auth_client, team, plans, gateway):
        for code in ("legacy", "does-not-exist"):
            response = auth_client.post(subscription_url(team), {"plan": code, "nonce": "t"}, format="json")

            assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
            assert response.data["error"]["details"]["plan"] == ["Unavailable plan."]
        gateway.charge_with_token.assert_not_called()

    def test_invalid_coupon_is_422(self, auth_client, team, plans, gateway):
        Coupon.objects.create(code="OFF", percent_off=10, is_active=False)

        response = auth_client.post(
            subscription_url(team), {"plan": "pro", "nonce": "tok-1", "coupon": "OFF"}, format="json"
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data["error"]["details"]["coupon"] == ["This coupon code is invalid."]

    def test_missing_nonce_is_422(self, auth_client, team, plans, gateway):
        response = auth_client.post(subscription_url(team), {"plan": "pro"}, format="json")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "nonce" in response.data["error"]["details"]

    def test_free_plan_cancels(self, auth_client, team, plans, gateway):
        Subscription.objects.create(team=team, plan=plans["pro"], status="active")

        response = auth_client.post(subscription_url(team), {"plan": "free"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"message": "Paid subscription cancelled"}

    def test_free_plan_without_subscription(self, auth_client, team, plans, gateway):
        response = auth_client.post(subscription_url(team), {"plan": "free"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"message": "The team is on the free plan."}

    def test_declined_payment_is_502(self, auth_client, team, plans, gateway, make_payment):
        gateway.charge_with_token.return_value = make_payment(status="canceled")

        response = auth_client.post(subscription_url(team), {"plan": "pro", "nonce": "tok-1"}, format="json")

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.data["error"]["code"] == "payment_service_error"

    def test_missing_scope_is_401(self, client_for, user, team, plans, gateway):
        client = client_for(user, scopes=["view-teams", "view-invoices"])

        response = client.post(subscription_url(team), {"plan": "pro", "nonce": "tok-1"}, format="json")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        gateway.charge_with_token.assert_not_called()

    def test_plain_member_is_403(self, client_for, team, plans, gateway, make_user, add_member):
        member = make_user()
        add_member(team, member)

        response = client_for(member).post(subscription_url(team), {"plan": "pro", "nonce": "t"}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_team_admin_may_subscribe(self, client_for, team, plans, gateway, make_user, add_member):
        admin = make_user()
        add_member(team, admin, role="admin")

        response = client_for(admin).post(subscription_url(team), {"plan": "pro", "nonce": "t"}, format="json")

        assert response.status_code == status.HTTP_200_OK

    def test_unknown_team_is_404(self, auth_client, plans, gateway):
        response = auth_client.post("/api/v1/teams/nope/subscription/", {"plan": "pro"}, format="json")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_throttled(self, auth_client, team, plans, gateway):
        with patch.object(SubscriptionChangeThrottle, "THROTTLE_RATES", {"subscription_change": "1/minute"}):
            first = auth_client.post(subscription_url(team), {"plan": "free"}, format="json")
            second = auth_client.post(subscription_url(team), {"plan": "free"}, format="json")

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_429_TOO_MANY_REQUESTS


@pytest.mark.django_db
class TestCancelResumeViews:

    def test_cancel_and_resume(self, auth_client, team, plans):
        subscription = Subscription(team=team, plan=plans["pro"], status="active")
        subscription.start_period()
        subscription.save()

        cancelled = auth_client.post(subscription_url(team, "cancel/"))
        assert cancelled.status_code == status.HTTP_200_OK
        assert cancelled.data["status"] == "cancelled"
        assert cancelled.data["on_grace_period"] is True

        again = auth_client.post(subscription_url(team, "cancel/"))
        assert again.status_code == status.HTTP_409_CONFLICT

        resumed = auth_client.post(subscription_url(team, "resume/"))
        assert resumed.status_code == status.HTTP_200_OK
        assert resumed.data["status"] == "active"

    def test_cancel_without_subscription_is_404(self, auth_client, team):
        response = auth_client.post(subscription_url(team, "cancel/"))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error"]["code"] == "subscription_not_found"


@pytest.mark.django_db
class TestInvoiceViews:

    def test_list_invoices(self, auth_client, team, plans, gateway, make_payment):
        Subscription.objects.create(team=team, plan=plans["pro"], status="active", payment_method_id="pm-1")
        gateway.list_team_payments.return_value = [make_payment(payment_id="pay-1")]

        response = auth_client.get(invoices_url(team))

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]["id"] == "pay-1"
        assert response.data[0]["total"] == "990.00"

    def test_list_requires_view_invoices(self, client_for, user, team, gateway):
        client = client_for(user, scopes=["manage-subscriptions"])

        response = client.get(invoices_url(team))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_invoice_detail(self, auth_client, team, gateway, make_payment):
        gateway.find_payment.return_value = make_payment(metadata={"team_id": str(team.id)})

        response = auth_client.get(invoices_url(team, "pay-1"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["vendor"] == "TeamPay"
        assert response.data["team"] == {"id": team.id, "name": "Acme"}
        gateway.find_payment.assert_called_once_with("pay-1")

    def test_unknown_invoice_is_404(self, auth_client, team, gateway):
        response = auth_client.get(invoices_url(team, "missing"))

        assert response.status_code == status.HTTP_404_NOT_FOUND
