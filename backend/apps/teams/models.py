"""
Models for teams app.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.text import slugify


class AliveTeamManager(models.Manager):
    """Hides soft-deleted teams."""

    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class Team(models.Model):
    """
    Billing and organizational unit.

    The slug is derived from the name and rebuilt whenever the name changes.
    Deleted teams keep their row (and slug) with `deleted_at` set.
    """

    name = models.CharField(max_length=255, verbose_name='Name')
    slug = models.SlugField(max_length=255, unique=True, verbose_name='Slug')
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='owned_teams',
        verbose_name='Owner'
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name='Created at')
    updated_at = models.DateTimeField(auto_now=True, verbose_name='Updated at')
    deleted_at = models.DateTimeField(null=True, blank=True, verbose_name='Deleted at')

    objects = AliveTeamManager()
    all_objects = models.Manager()

    class Meta:
        db_table = 'teams'
        verbose_name = 'Team'
        verbose_name_plural = 'Teams'
        ordering = ['id']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._loaded_name = self.name

    def __str__(self):
        return f"{self.name} ({self.slug})"

    @classmethod
    def unique_slug(cls, name, exclude_pk=None):
        """
        slugify(name), suffixed with -2, -3, ... until no team (deleted ones
        included) holds it.
        """
        base = slugify(name)[:240] or 'team'
        candidate = base
        suffix = 2
        taken = cls.all_objects.all()
        if exclude_pk is not None:
            taken = taken.exclude(pk=exclude_pk)
        while taken.filter(slug=candidate).exists():
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    def save(self, *args, **kwargs):
        if not self.slug or self.name != self._loaded_name:
            self.slug = self.unique_slug(self.name, exclude_pk=self.pk)
            update_fields = kwargs.get('update_fields')
            if update_fields is not None and 'slug' not in update_fields:
                kwargs['update_fields'] = list(update_fields) + ['slug']
        super().save(*args, **kwargs)
        self._loaded_name = self.name

    def soft_delete(self):
        self.deleted_at = timezone.now()
        self.save(update_fields=['deleted_at', 'updated_at'])

    @property
    def is_deleted(self):
        return self.deleted_at is not None

    # Billing helpers

    def current_subscription(self):
        """Latest subscription that has not expired, or None."""
        return (
            self.subscriptions
            .exclude(status='expired')
            .select_related('plan')
            .order_by('-created_at')
            .first()
        )

    def subscribed(self):
        """True when the team holds a valid paid subscription."""
        subscription = self.current_subscription()
        if subscription is None or not subscription.is_valid():
            return False
        return subscription.plan.code != settings.BILLING_FREE_PLAN_CODE

    def has_payment_method(self):
        """True once any subscription of the team stored a provider payment method."""
        return self.subscriptions.exclude(payment_method_id='').exists()


class TeamMember(models.Model):
    ROLE_OWNER = 'owner'
    ROLE_ADMIN = 'admin'
    ROLE_MEMBER = 'member'

    ROLE_CHOICES = [
        (ROLE_OWNER, 'Owner'),
        (ROLE_ADMIN, 'Admin'),
        (ROLE_MEMBER, 'Member'),
    ]

    ADMIN_ROLES = (ROLE_OWNER, ROLE_ADMIN)

    team = models.ForeignKey(
        Team,
        on_delete=models.CASCADE,
        related_name='memberships',
        verbose_name='Team'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='team_memberships',
        verbose_name='User'
    )
    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default=ROLE_MEMBER,
        verbose_name='Role'
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='Joined at')

    class Meta:
        db_table = 'team_users'
        verbose_name = 'Team member'
        verbose_name_plural = 'Team members'
        constraints = [
            models.UniqueConstraint(fields=['team', 'user'], name='unique_team_member'),
        ]

    def __str__(self):
        return f"{self.user} in {self.team.slug} as {self.role}"
