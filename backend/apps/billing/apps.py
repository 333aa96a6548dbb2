"""
billing/apps.py

AppConfig for the billing app.
"""

from __future__ import annotations

from django.apps import AppConfig


class BillingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.billing"
    verbose_name = "Billing / Plans and subscriptions"
