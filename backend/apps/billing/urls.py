"""
billing/urls.py

Billing API routes.

- plans + webhook live under /api/v1/billing/ (urlpatterns)
- subscription and invoice routes hang off a team (team_urlpatterns),
  included at /api/v1/
"""

from __future__ import annotations

from django.urls import path

from . import views
from .webhooks import yookassa_webhook

app_name = "billing"


urlpatterns = [
    # -----------------------------------------------------------------
    # Public
    # -----------------------------------------------------------------
    path("plans/", views.get_subscription_plans, name="subscription-plans"),

    # -----------------------------------------------------------------
    # Webhooks
    # -----------------------------------------------------------------
    path("webhooks/yookassa/", yookassa_webhook, name="yookassa-webhook"),
]


team_urlpatterns = [
    # -----------------------------------------------------------------
    # Subscription lifecycle
    # -----------------------------------------------------------------
    path("teams/<slug:slug>/subscription/", views.subscribe, name="subscribe"),
    path("teams/<slug:slug>/subscription/cancel/", views.cancel_subscription, name="subscription-cancel"),
    path("teams/<slug:slug>/subscription/resume/", views.resume_subscription, name="subscription-resume"),

    # -----------------------------------------------------------------
    # Invoices
    # -----------------------------------------------------------------
    path("teams/<slug:slug>/invoices/", views.list_invoices, name="invoice-list"),
    path("teams/<slug:slug>/invoices/<str:invoice_id>/", views.get_invoice, name="invoice-detail"),
]
