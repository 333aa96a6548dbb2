"""
Models for plans, coupons and team subscriptions.

Invoices are not stored: they are YooKassa payments fetched on demand.
"""

from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone


class SubscriptionPlan(models.Model):
    """
    Billing tier. Administrators manage plans through Django Admin.
    """
    code = models.CharField(
        'System code',
        max_length=50,
        unique=True,
        help_text='Plan id sent by clients (e.g. free, pro-monthly)'
    )
    display_name = models.CharField('Display name', max_length=100)
    description = models.TextField('Description', blank=True)

    price = models.DecimalField('Price', max_digits=10, decimal_places=2, default=0)
    currency = models.CharField('Currency', max_length=3, default='RUB')
    duration_days = models.PositiveIntegerField('Duration (days)', default=30)

    is_active = models.BooleanField('Active', default=True)
    created_at = models.DateTimeField('Created at', auto_now_add=True)
    updated_at = models.DateTimeField('Updated at', auto_now=True)

    class Meta:
        db_table = 'subscription_plans'
        verbose_name = 'Subscription plan'
        verbose_name_plural = 'Subscription plans'
        ordering = ['price']

    def __str__(self):
        return f"{self.display_name} - {self.price} {self.currency}"

    @property
    def is_free(self):
        return self.code == settings.BILLING_FREE_PLAN_CODE


class Coupon(models.Model):
    """
    Discount on the first charge of a new subscription.

    Either percent_off or amount_off is set.
    """
    code = models.CharField('Code', max_length=50, unique=True)
    percent_off = models.PositiveSmallIntegerField(
        'Percent off',
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(100)]
    )
    amount_off = models.DecimalField(
        'Amount off',
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True
    )
    is_active = models.BooleanField('Active', default=True)
    valid_until = models.DateTimeField('Valid until', null=True, blank=True)
    created_at = models.DateTimeField('Created at', auto_now_add=True)

    class Meta:
        db_table = 'coupons'
        verbose_name = 'Coupon'
        verbose_name_plural = 'Coupons'

    def __str__(self):
        return self.code

    def is_valid(self, now=None):
        if not self.is_active:
            return False
        return self.valid_until is None or self.valid_until > (now or timezone.now())

    def apply(self, amount: Decimal) -> Decimal:
        """Discounted amount, never below zero."""
        if self.percent_off:
            discounted = amount * (Decimal(100) - self.percent_off) / Decimal(100)
        elif self.amount_off:
            discounted = amount - self.amount_off
        else:
            discounted = amount
        return max(discounted, Decimal('0.00')).quantize(Decimal('0.01'))


class Subscription(models.Model):
    """
    A team's subscription to a plan.

    A team has at most one subscription that is not expired.
    """
    STATUS_PENDING = 'pending'
    STATUS_ACTIVE = 'active'
    STATUS_CANCELLED = 'cancelled'
    STATUS_EXPIRED = 'expired'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACTIVE, 'Active'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_EXPIRED, 'Expired'),
    ]

    team = models.ForeignKey(
        'teams.Team',
        on_delete=models.CASCADE,
        related_name='subscriptions',
        verbose_name='Team'
    )
    name = models.CharField('Name', max_length=50, default='default')
    plan = models.ForeignKey(
        SubscriptionPlan,
        on_delete=models.PROTECT,
        related_name='subscriptions',
        verbose_name='Plan'
    )
    status = models.CharField('Status', max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)

    # YooKassa
    provider_id = models.CharField(
        'YooKassa payment id',
        max_length=255,
        blank=True,
        db_index=True,
        help_text='Payment that created (or last swapped) the subscription'
    )
    payment_method_id = models.CharField(
        'YooKassa payment method id',
        max_length=255,
        blank=True,
        help_text='Saved payment method for renewals and swaps'
    )
    coupon = models.ForeignKey(
        Coupon,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='subscriptions',
        verbose_name='Coupon'
    )

    # Dates
    current_period_start = models.DateTimeField('Period start', null=True, blank=True)
    current_period_end = models.DateTimeField('Period end', null=True, blank=True)
    ends_at = models.DateTimeField(
        'Ends at',
        null=True,
        blank=True,
        help_text='End of the grace period after cancellation'
    )
    auto_renew = models.BooleanField('Auto renew', default=True)

    # Plan change charged with a new card, waiting for 3-D Secure
    pending_plan = models.ForeignKey(
        SubscriptionPlan,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+',
        verbose_name='Pending plan'
    )
    pending_provider_id = models.CharField(
        'Pending YooKassa payment id',
        max_length=255,
        blank=True,
        db_index=True,
        help_text='Swap payment the webhook has not confirmed yet'
    )
    pending_since = models.DateTimeField('Pending since', null=True, blank=True)

    created_at = models.DateTimeField('Created at', auto_now_add=True)
    updated_at = models.DateTimeField('Updated at', auto_now=True)

    class Meta:
        db_table = 'subscriptions'
        verbose_name = 'Subscription'
        verbose_name_plural = 'Subscriptions'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['team'],
                condition=~Q(status='expired'),
                name='one_live_subscription_per_team',
            ),
        ]

    def __str__(self):
        return f"{self.team_id} - {self.plan.code} ({self.status})"

    def start_period(self, now=None):
        start = now or timezone.now()
        self.current_period_start = start
        self.current_period_end = start + timedelta(days=self.plan.duration_days)

    def on_grace_period(self, now=None):
        return (
            self.status == self.STATUS_CANCELLED
            and self.ends_at is not None
            and self.ends_at > (now or timezone.now())
        )

    def is_valid(self, now=None):
        return self.status == self.STATUS_ACTIVE or self.on_grace_period(now)

    def has_pending_swap(self):
        return bool(self.pending_provider_id)

    def clear_pending_swap(self):
        self.pending_plan = None
        self.pending_provider_id = ''
        self.pending_since = None

    def is_due_for_renewal(self, now=None):
        return (
            self.status == self.STATUS_ACTIVE
            and self.auto_renew
            and self.current_period_end is not None
            and self.current_period_end <= (now or timezone.now())
        )


class WebhookLog(models.Model):
    """
    Incoming YooKassa notifications, one row per event (idempotency key).
    """
    STATUS_CHOICES = [
        ('RECEIVED', 'Received'),
        ('PROCESSED', 'Processed'),
        ('IGNORED', 'Ignored'),
    ]

    event_id = models.CharField('Idempotency key', max_length=255, unique=True)
    event_type = models.CharField('Event type', max_length=100)
    payment_id = models.CharField('Payment id', max_length=255, blank=True, db_index=True)
    status = models.CharField('Status', max_length=20, choices=STATUS_CHOICES, default='RECEIVED')
    client_ip = models.GenericIPAddressField('Client IP', null=True, blank=True)
    created_at = models.DateTimeField('Received at', auto_now_add=True)
    processed_at = models.DateTimeField('Processed at', null=True, blank=True)

    class Meta:
        db_table = 'billing_webhook_logs'
        verbose_name = 'Webhook log'
        verbose_name_plural = 'Webhook logs'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.event_type} {self.payment_id} ({self.status})"
