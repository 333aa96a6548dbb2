"""
conftest.py: pytest setup for the Django project.
"""

import os
import sys

import pytest

# Must be set before pytest-django loads Django
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-pytest-only")
os.environ["DJANGO_SETTINGS_MODULE"] = "config.settings.test"

backend_dir = os.path.dirname(os.path.abspath(__file__))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters live in the cache; start every test from zero."""
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()


# ---------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------

@pytest.fixture
def make_user(db):
    from django.contrib.auth import get_user_model

    User = get_user_model()
    counter = {"n": 0}

    def _make_user(email=None, password="secret123", name="Test User", **extra):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        user = User.objects.create_user(username=email, email=email, password=password, **extra)
        user.profile.name = name
        user.profile.save(update_fields=["name", "updated_at"])
        return user

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user(email="owner@example.com", name="Owner")


@pytest.fixture
def api_client():
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def client_for(db):
    """APIClient carrying a real Bearer token with the given scopes."""
    from rest_framework.test import APIClient

    from apps.users.tokens import issue_tokens

    def _client_for(user, scopes=("*",)):
        client = APIClient()
        access = issue_tokens(user, scopes)["access_token"]
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        return client

    return _client_for


@pytest.fixture
def auth_client(client_for, user):
    return client_for(user)


@pytest.fixture
def make_team(db):
    from apps.teams import services

    def _make_team(owner, name="Acme"):
        return services.create_team(owner, name)

    return _make_team


@pytest.fixture
def team(make_team, user):
    return make_team(user, "Acme")


@pytest.fixture
def add_member(db):
    from apps.teams.models import TeamMember

    def _add_member(team, user, role="member"):
        return TeamMember.objects.create(team=team, user=user, role=role)

    return _add_member


@pytest.fixture
def plans(db):
    from decimal import Decimal

    from apps.billing.models import SubscriptionPlan

    return {
        "free": SubscriptionPlan.objects.create(
            code="free", display_name="Free", price=Decimal("0.00"),
        ),
        "pro": SubscriptionPlan.objects.create(
            code="pro", display_name="Pro", price=Decimal("990.00"),
        ),
        "business": SubscriptionPlan.objects.create(
            code="business", display_name="Business", price=Decimal("2990.00"),
        ),
        "legacy": SubscriptionPlan.objects.create(
            code="legacy", display_name="Legacy", price=Decimal("490.00"), is_active=False,
        ),
    }


def payment_result(payment_id="pay-1", status="succeeded", **overrides):
    """Normalized payment dict as returned by YooKassaGateway."""
    from decimal import Decimal

    data = {
        "id": payment_id,
        "status": status,
        "amount": Decimal("990.00"),
        "currency": "RUB",
        "description": "Pro subscription for Acme",
        "created_at": "2026-01-15T10:00:00.000Z",
        "paid": status == "succeeded",
        "metadata": {},
        "confirmation_url": None,
        "payment_method_id": "pm-1",
        "payment_method_saved": True,
    }
    data.update(overrides)
    return data


@pytest.fixture
def gateway():
    """Mocked YooKassa gateway used by apps.billing.services."""
    from unittest.mock import MagicMock, patch

    fake = MagicMock()
    fake.charge_with_token.return_value = payment_result()
    fake.charge_saved_method.return_value = payment_result(payment_id="pay-2")
    fake.find_payment.return_value = None
    fake.list_team_payments.return_value = []
    with patch("apps.billing.services.get_gateway", return_value=fake):
        yield fake


@pytest.fixture
def make_payment():
    return payment_result
