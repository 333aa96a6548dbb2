"""
billing/serializers.py

DRF serializers for billing.

- the plan is validated against the DB; amounts never come from the client
- invoices are provider payments, so their serializer is not a ModelSerializer
"""

from __future__ import annotations

from rest_framework import serializers

from .models import Coupon, Subscription, SubscriptionPlan


class SubscriptionPlanSerializer(serializers.ModelSerializer):
    """Public plan list for /billing/plans/."""

    class Meta:
        model = SubscriptionPlan
        fields = ['code', 'display_name', 'description', 'price', 'currency', 'duration_days']
        read_only_fields = fields


class SubscribeSerializer(serializers.Serializer):
    """
    POST teams/{slug}/subscription/

    plan:   plan code, must be an active plan
    nonce:  YooKassa checkout payment_token; needed for a new paid subscription
    coupon: optional coupon code
    """
    plan = serializers.CharField(max_length=50)
    nonce = serializers.CharField(required=False, allow_blank=True, default='')
    coupon = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)

    def validate_plan(self, value):
        plan = SubscriptionPlan.objects.filter(code=value, is_active=True).first()
        if plan is None:
            raise serializers.ValidationError("Unavailable plan.")
        return plan

    def validate_coupon(self, value):
        if not value:
            return None
        coupon = Coupon.objects.filter(code=value).first()
        if coupon is None or not coupon.is_valid():
            raise serializers.ValidationError("This coupon code is invalid.")
        return coupon


class SubscriptionSerializer(serializers.ModelSerializer):
    plan = serializers.SlugRelatedField(slug_field='code', read_only=True)
    pending_plan = serializers.SlugRelatedField(slug_field='code', read_only=True)
    on_grace_period = serializers.SerializerMethodField()

    class Meta:
        model = Subscription
        fields = [
            'id',
            'name',
            'plan',
            'status',
            'pending_plan',
            'current_period_start',
            'current_period_end',
            'ends_at',
            'auto_renew',
            'on_grace_period',
            'created_at',
        ]
        read_only_fields = fields

    def get_on_grace_period(self, obj) -> bool:
        return obj.on_grace_period()


class InvoiceSerializer(serializers.Serializer):
    id = serializers.CharField()
    status = serializers.CharField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    created_at = serializers.CharField()
    description = serializers.CharField(allow_blank=True)


class InvoiceDetailSerializer(InvoiceSerializer):
    vendor = serializers.CharField()
    product = serializers.CharField()
    team = serializers.DictField()
