"""
Tests for the account endpoints and the suspension gate.
"""

from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework import status

ACCOUNT_URL = "/api/v1/account/"
PASSWORD_URL = "/api/v1/account/password/"


@pytest.mark.django_db
class TestAccount:

    def test_requires_authentication(self, api_client):
        response = api_client.get(ACCOUNT_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data["error"]["code"] == "UNAUTHORIZED"

    def test_returns_current_user(self, auth_client, user):
        response = auth_client.get(ACCOUNT_URL)

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == user.id
        assert response.data["email"] == "owner@example.com"


@pytest.mark.django_db
class TestSuspensionGate:

    def test_suspended_user_gets_403_with_fields(self, auth_client, user):
        until = timezone.now() + timedelta(days=3)
        user.profile.suspend(until, reason="Chargeback")

        response = auth_client.get(ACCOUNT_URL)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error"]["code"] == "account_suspended"
        assert response.data["suspended_reason"] == "Chargeback"
        assert response.data["suspended_to"] == until.isoformat()
        assert response.data["suspended_at"] is not None

    def test_expired_suspension_lets_user_in(self, auth_client, user):
        user.profile.suspend(timezone.now() - timedelta(minutes=1), reason="Old")

        response = auth_client.get(ACCOUNT_URL)

        assert response.status_code == status.HTTP_200_OK

    def test_lifted_suspension(self, auth_client, user):
        user.profile.suspend(timezone.now() + timedelta(days=1))
        user.profile.lift_suspension()

        response = auth_client.get(ACCOUNT_URL)

        assert response.status_code == status.HTTP_200_OK

    def test_suspension_gates_team_endpoints(self, auth_client, user):
        user.profile.suspend(timezone.now() + timedelta(days=1))

        response = auth_client.get("/api/v1/teams/")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert "suspended_to" in response.data


@pytest.mark.django_db
class TestPasswordUpdate:

    def _payload(self, **overrides):
        data = {"current": "secret123", "password": "newpass99", "password_confirmation": "newpass99"}
        data.update(overrides)
        return data

    def test_changes_password(self, auth_client, user):
        response = auth_client.post(PASSWORD_URL, self._payload(), format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == user.id
        user.refresh_from_db()
        assert user.check_password("newpass99")

    def test_put_is_accepted(self, auth_client, user):
        response = auth_client.put(PASSWORD_URL, self._payload(), format="json")

        assert response.status_code == status.HTTP_200_OK

    def test_wrong_current_password(self, auth_client, user):
        response = auth_client.post(PASSWORD_URL, self._payload(current="nope-nope"), format="json")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data["error"]["details"]["current"] == ["These credentials do not match our records."]
        user.refresh_from_db()
        assert user.check_password("secret123")

    def test_confirmation_mismatch(self, auth_client):
        response = auth_client.post(
            PASSWORD_URL, self._payload(password_confirmation="other999"), format="json"
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "password" in response.data["error"]["details"]
