"""
Audit trail for account, team and subscription events.

Connected in CommonConfig.ready(); every receiver only writes to the
`security` log.
"""

from django.dispatch import receiver

from apps.billing.signals import (
    subscription_cancelled,
    subscription_created,
    subscription_resumed,
    subscription_swapped,
)
from apps.teams.signals import team_created, team_deleted, team_updated
from apps.users.signals import user_created

from .audit import SecurityAuditLogger


@receiver(user_created, dispatch_uid="audit_user_created")
def audit_user_created(sender, user, request=None, **kwargs):
    SecurityAuditLogger.log_registration(user, request)


@receiver(team_created, dispatch_uid="audit_team_created")
def audit_team_created(sender, team, user=None, **kwargs):
    SecurityAuditLogger.log_team_change(team, "created", user)


@receiver(team_updated, dispatch_uid="audit_team_updated")
def audit_team_updated(sender, team, user=None, **kwargs):
    SecurityAuditLogger.log_team_change(team, "updated", user)


@receiver(team_deleted, dispatch_uid="audit_team_deleted")
def audit_team_deleted(sender, team, user=None, **kwargs):
    SecurityAuditLogger.log_team_change(team, "deleted", user)


def _log_subscription(action):
    def handler(sender, team, subscription=None, **kwargs):
        SecurityAuditLogger.log_subscription_change(
            team,
            action,
            plan=subscription.plan.code if subscription is not None else None,
            subscription_id=subscription.pk if subscription is not None else None,
        )
    handler.__name__ = f"audit_subscription_{action}"
    return handler


audit_subscription_created = _log_subscription("created")
audit_subscription_swapped = _log_subscription("swapped")
audit_subscription_cancelled = _log_subscription("cancelled")
audit_subscription_resumed = _log_subscription("resumed")

subscription_created.connect(audit_subscription_created, dispatch_uid="audit_subscription_created")
subscription_swapped.connect(audit_subscription_swapped, dispatch_uid="audit_subscription_swapped")
subscription_cancelled.connect(audit_subscription_cancelled, dispatch_uid="audit_subscription_cancelled")
subscription_resumed.connect(audit_subscription_resumed, dispatch_uid="audit_subscription_resumed")
