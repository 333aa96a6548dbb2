"""
billing/admin.py

Django Admin for the billing app.

- SubscriptionPlan: code is readonly once created (clients send it)
- Subscription: colored status, quick filters
- WebhookLog: read-only audit trail
"""

from __future__ import annotations

from django.contrib import admin
from django.utils.html import format_html

from .models import Coupon, Subscription, SubscriptionPlan, WebhookLog

STATUS_COLORS = {
    Subscription.STATUS_PENDING: "#e67700",
    Subscription.STATUS_ACTIVE: "#2b8a3e",
    Subscription.STATUS_CANCELLED: "#c92a2a",
    Subscription.STATUS_EXPIRED: "#868e96",
}


# ---------------------------------------------------------------------
# SubscriptionPlan
# ---------------------------------------------------------------------

@admin.register(SubscriptionPlan)
class SubscriptionPlanAdmin(admin.ModelAdmin):
    list_display = ("code", "display_name", "price", "currency", "duration_days", "is_active", "created_at")
    list_filter = ("is_active", "created_at")
    search_fields = ("code", "display_name", "description")
    ordering = ("price",)

    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return ("code", "created_at", "updated_at")
        return ("created_at", "updated_at")

    def has_delete_permission(self, request, obj=None):
        # Plans are referenced by subscriptions (PROTECT); deactivate instead
        return False


# ---------------------------------------------------------------------
# Coupon
# ---------------------------------------------------------------------

@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ("code", "percent_off", "amount_off", "is_active", "valid_until", "created_at")
    list_filter = ("is_active",)
    search_fields = ("code",)


# ---------------------------------------------------------------------
# Subscription
# ---------------------------------------------------------------------

@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "team",
        "plan",
        "status_badge",
        "current_period_end",
        "ends_at",
        "auto_renew",
        "card_bound",
    )
    list_filter = ("status", "plan", "auto_renew")
    search_fields = ("team__name", "team__slug", "provider_id", "pending_provider_id")
    raw_id_fields = ("team",)
    readonly_fields = (
        "provider_id", "payment_method_id", "pending_plan", "pending_provider_id", "pending_since",
        "created_at", "updated_at",
    )

    @admin.display(description="Status")
    def status_badge(self, obj: Subscription):
        return format_html(
            '<span style="color:{};font-weight:700;">{}</span>',
            STATUS_COLORS.get(obj.status, "#000"),
            obj.get_status_display(),
        )

    @admin.display(description="Card", boolean=True)
    def card_bound(self, obj: Subscription):
        return bool(obj.payment_method_id)


# ---------------------------------------------------------------------
# WebhookLog
# ---------------------------------------------------------------------

@admin.register(WebhookLog)
class WebhookLogAdmin(admin.ModelAdmin):
    list_display = ("event_type", "payment_id", "status", "client_ip", "created_at", "processed_at")
    list_filter = ("event_type", "status")
    search_fields = ("event_id", "payment_id")
    readonly_fields = [f.name for f in WebhookLog._meta.fields]

    def has_add_permission(self, request):
        return False
