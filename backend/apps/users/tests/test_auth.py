"""
Tests for register / login / refresh / logout.
"""

from unittest.mock import patch

import pytest
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken

from apps.users.signals import user_created
from apps.users.throttles import LoginThrottle

User = get_user_model()

REGISTER_URL = "/api/v1/auth/register/"
LOGIN_URL = "/api/v1/auth/login/"
REFRESH_URL = "/api/v1/auth/refresh/"
LOGOUT_URL = "/api/v1/auth/logout/"


def _registration(**overrides):
    data = {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "password": "secret123",
        "password_confirmation": "secret123",
        "country": "us",
    }
    data.update(overrides)
    return data


@pytest.mark.django_db
class TestRegister:

    def test_register_creates_user_and_profile(self, api_client):
        response = api_client.post(REGISTER_URL, _registration(), format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["email"] == "jane@example.com"
        assert response.data["name"] == "Jane Doe"
        assert response.data["country"] == "US"
        assert response.data["current_team_id"] is None

        user = User.objects.get(email="jane@example.com")
        assert user.check_password("secret123")
        assert user.profile.name == "Jane Doe"

    def test_register_sends_user_created(self, api_client):
        received = []

        def listener(sender, user, **kwargs):
            received.append(user.email)

        user_created.connect(listener)
        try:
            api_client.post(REGISTER_URL, _registration(), format="json")
        finally:
            user_created.disconnect(listener)

        assert received == ["jane@example.com"]

    def test_duplicate_email_is_422(self, api_client, make_user):
        make_user(email="jane@example.com")

        response = api_client.post(REGISTER_URL, _registration(email="JANE@example.com"), format="json")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data["error"]["code"] == "VALIDATION_ERROR"
        assert response.data["error"]["details"]["email"] == ["The email has already been taken."]

    def test_password_confirmation_mismatch(self, api_client):
        response = api_client.post(
            REGISTER_URL, _registration(password_confirmation="different1"), format="json"
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "password" in response.data["error"]["details"]

    def test_short_password_rejected(self, api_client):
        response = api_client.post(
            REGISTER_URL, _registration(password="123", password_confirmation="123"), format="json"
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "password" in response.data["error"]["details"]

    def test_invalid_country(self, api_client):
        response = api_client.post(REGISTER_URL, _registration(country="USA"), format="json")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data["error"]["details"]["country"] == ["Use a two letter country code."]


@pytest.mark.django_db
class TestLogin:

    def test_login_returns_bearer_pair(self, api_client, user):
        response = api_client.post(
            LOGIN_URL, {"email": "owner@example.com", "password": "secret123"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["token_type"] == "Bearer"
        assert response.data["expires_in"] == 3600
        assert AccessToken(response.data["access_token"])["scopes"] == ["*"]

    def test_login_with_scopes(self, api_client, user):
        response = api_client.post(
            LOGIN_URL,
            {"email": "owner@example.com", "password": "secret123", "scope": "view-teams view-invoices"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert AccessToken(response.data["access_token"])["scopes"] == ["view-teams", "view-invoices"]

    def test_unknown_scope_is_422(self, api_client, user):
        response = api_client.post(
            LOGIN_URL,
            {"email": "owner@example.com", "password": "secret123", "scope": "root"},
            format="json",
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "scope" in response.data["error"]["details"]

    def test_wrong_password_is_401(self, api_client, user):
        with patch("apps.users.views.SecurityAuditLogger") as audit:
            response = api_client.post(
                LOGIN_URL, {"email": "owner@example.com", "password": "wrong-pass"}, format="json"
            )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data["error"]["code"] == "UNAUTHORIZED"
        audit.log_login_failure.assert_called_once()

    def test_unknown_email_is_401(self, api_client):
        response = api_client.post(
            LOGIN_URL, {"email": "nobody@example.com", "password": "secret123"}, format="json"
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_is_case_insensitive_on_email(self, api_client, user):
        response = api_client.post(
            LOGIN_URL, {"email": "OWNER@example.com", "password": "secret123"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK

    def test_login_throttled(self, api_client, user):
        payload = {"email": "owner@example.com", "password": "wrong-pass"}
        with patch.object(LoginThrottle, "THROTTLE_RATES", {"login": "2/minute"}):
            codes = [api_client.post(LOGIN_URL, payload, format="json").status_code for _ in range(3)]

        assert codes == [401, 401, 429]

    def test_login_throttle_is_per_ip_not_per_email(self, api_client, user, make_user):
        make_user(email="second@example.com")
        attempts = [
            {"email": "owner@example.com", "password": "wrong-pass"},
            {"email": "second@example.com", "password": "wrong-pass"},
            {"email": "nobody@example.com", "password": "wrong-pass"},
        ]
        with patch.object(LoginThrottle, "THROTTLE_RATES", {"login": "2/minute"}):
            codes = [api_client.post(LOGIN_URL, payload, format="json").status_code for payload in attempts]

        assert codes == [401, 401, 429]


@pytest.mark.django_db
class TestRefreshAndLogout:

    def _login(self, api_client, scope=""):
        response = api_client.post(
            LOGIN_URL,
            {"email": "owner@example.com", "password": "secret123", "scope": scope},
            format="json",
        )
        return response.data

    def test_refresh_rotates_and_keeps_scopes(self, api_client, user):
        tokens = self._login(api_client, scope="view-teams")

        response = api_client.post(REFRESH_URL, {"refresh_token": tokens["refresh_token"]}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["refresh_token"] != tokens["refresh_token"]
        assert AccessToken(response.data["access_token"])["scopes"] == ["view-teams"]

        # The old refresh token is blacklisted after rotation
        again = api_client.post(REFRESH_URL, {"refresh_token": tokens["refresh_token"]}, format="json")
        assert again.status_code == status.HTTP_400_BAD_REQUEST
        assert again.data["error"]["code"] == "INVALID_GRANT"

    def test_garbage_refresh_token_is_400(self, api_client):
        response = api_client.post(REFRESH_URL, {"refresh_token": "not-a-token"}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error"]["code"] == "INVALID_GRANT"

    def test_refresh_for_inactive_user_is_400(self, api_client, user):
        tokens = self._login(api_client)
        user.is_active = False
        user.save(update_fields=["is_active"])

        response = api_client.post(REFRESH_URL, {"refresh_token": tokens["refresh_token"]}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_logout_revokes_given_token(self, api_client, user):
        tokens = self._login(api_client)
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access_token']}")

        response = api_client.post(LOGOUT_URL, {"refresh_token": tokens["refresh_token"]}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"message": "Logged out."}

        api_client.credentials()
        refresh = api_client.post(REFRESH_URL, {"refresh_token": tokens["refresh_token"]}, format="json")
        assert refresh.status_code == status.HTTP_400_BAD_REQUEST

    def test_logout_without_token_revokes_everything(self, api_client, user):
        first = self._login(api_client)
        second = self._login(api_client)
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {first['access_token']}")

        response = api_client.post(LOGOUT_URL, {}, format="json")

        assert response.status_code == status.HTTP_200_OK
        api_client.credentials()
        for tokens in (first, second):
            refresh = api_client.post(REFRESH_URL, {"refresh_token": tokens["refresh_token"]}, format="json")
            assert refresh.status_code == status.HTTP_400_BAD_REQUEST

    def test_logout_requires_authentication(self, api_client):
        response = api_client.post(LOGOUT_URL, {}, format="json")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
