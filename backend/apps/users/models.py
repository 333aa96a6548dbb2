"""
Models for users app.
"""

from django.contrib.auth.models import User
from django.db import models
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils import timezone


class Profile(models.Model):
    """
    User profile model extending Django's built-in User model.

    Holds the display name, the currently active team and the suspension
    fields checked on every data-bearing request.
    """

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='profile',
        verbose_name='User'
    )

    name = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Name'
    )

    country = models.CharField(
        max_length=2,
        blank=True,
        verbose_name='Country',
        help_text='ISO 3166-1 alpha-2 country code'
    )

    current_team = models.ForeignKey(
        'teams.Team',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name='Active team'
    )

    # Suspension
    suspended_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Suspended at'
    )
    suspended_to = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Suspended until',
        help_text='Access is denied while this moment is in the future'
    )
    suspended_reason = models.CharField(
        max_length=255,
        blank=True,
        null=True,
        verbose_name='Suspension reason'
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name='Created at')
    updated_at = models.DateTimeField(auto_now=True, verbose_name='Updated at')

    class Meta:
        db_table = 'profiles'
        verbose_name = 'Profile'
        verbose_name_plural = 'Profiles'

    def __str__(self):
        return f"Profile of {self.user.email or self.user.username}"

    def is_suspended(self, now=None):
        """True while `suspended_to` lies in the future."""
        if not self.suspended_to:
            return False
        return self.suspended_to > (now or timezone.now())

    def suspend(self, until, reason=''):
        self.suspended_at = timezone.now()
        self.suspended_to = until
        self.suspended_reason = reason
        self.save(update_fields=['suspended_at', 'suspended_to', 'suspended_reason', 'updated_at'])

    def lift_suspension(self):
        self.suspended_at = None
        self.suspended_to = None
        self.suspended_reason = None
        self.save(update_fields=['suspended_at', 'suspended_to', 'suspended_reason', 'updated_at'])


@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    """
    Signal handler to create Profile when User is created.
    """
    if created:
        Profile.objects.get_or_create(user=instance)
