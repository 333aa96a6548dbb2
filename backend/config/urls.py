"""
URL configuration for TeamPay.
"""

import base64
import binascii
import os
import secrets

from django.conf import settings
from django.contrib import admin
from django.http import HttpResponse
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)

from apps.billing.urls import team_urlpatterns as billing_team_urlpatterns
from apps.common.views import health_check, liveness_check, readiness_check


def _docs_credentials_ok(request) -> bool:
    """
    Basic auth for the API docs.

    SWAGGER_AUTH_USERNAME (default: admin) / SWAGGER_AUTH_PASSWORD.
    Without a configured password the docs are open only under DEBUG.
    """
    expected_password = os.environ.get("SWAGGER_AUTH_PASSWORD")
    if not expected_password:
        return settings.DEBUG

    auth_header = request.META.get("HTTP_AUTHORIZATION", "")
    if not auth_header.startswith("Basic "):
        return False

    try:
        credentials = base64.b64decode(auth_header[6:]).decode("utf-8")
        username, password = credentials.split(":", 1)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return False

    expected_username = os.environ.get("SWAGGER_AUTH_USERNAME", "admin")
    return secrets.compare_digest(username, expected_username) and secrets.compare_digest(
        password, expected_password
    )


def basic_auth_required(view_func):
    def wrapped_view(request, *args, **kwargs):
        if _docs_credentials_ok(request):
            return view_func(request, *args, **kwargs)

        response = HttpResponse("Unauthorized", status=401)
        response["WWW-Authenticate"] = 'Basic realm="TeamPay API Documentation"'
        return response

    return wrapped_view


urlpatterns = [
    # Admin
    path("dj-admin/", admin.site.urls),
    # Health checks
    path("health/", health_check, name="health"),
    path("api/v1/health/", health_check, name="health-v1"),
    path("ready/", readiness_check, name="readiness"),
    path("live/", liveness_check, name="liveness"),
    # API v1
    path("api/v1/", include("apps.users.urls")),  # auth/ and account/
    path("api/v1/", include((billing_team_urlpatterns, "billing-teams"))),  # teams/<slug>/subscription|invoices/
    path("api/v1/", include("apps.teams.urls")),  # teams/ and dashboard/teams/
    path("api/v1/billing/", include("apps.billing.urls")),  # plans/ and webhooks/
    # API schema and docs (Basic Auth)
    path("api/schema/", basic_auth_required(SpectacularAPIView.as_view()), name="schema"),
    path(
        "api/schema/swagger-ui/",
        basic_auth_required(SpectacularSwaggerView.as_view(url_name="schema")),
        name="swagger-ui",
    ),
    path(
        "api/schema/redoc/",
        basic_auth_required(SpectacularRedocView.as_view(url_name="schema")),
        name="redoc",
    ),
]
