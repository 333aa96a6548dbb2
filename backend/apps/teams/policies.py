"""
Team authorization policy.

Abilities:
    view            any member
    update          owner or admin
    manage-billing  owner or admin
    delete          owner only
"""

from __future__ import annotations

from typing import Optional

from apps.common.audit import SecurityAuditLogger
from apps.core.exceptions import PermissionDeniedError

from .models import Team, TeamMember


def member_role(user, team: Team) -> Optional[str]:
    if user is None or not user.is_authenticated:
        return None
    return (
        TeamMember.objects
        .filter(team=team, user=user)
        .values_list('role', flat=True)
        .first()
    )


def is_member(user, team: Team) -> bool:
    return member_role(user, team) is not None


def is_team_admin(user, team: Team) -> bool:
    return member_role(user, team) in TeamMember.ADMIN_ROLES


def is_owner(user, team: Team) -> bool:
    return member_role(user, team) == TeamMember.ROLE_OWNER


ABILITIES = {
    'view': is_member,
    'update': is_team_admin,
    'manage-billing': is_team_admin,
    'delete': is_owner,
}


def allows(user, team: Team, ability: str) -> bool:
    return ABILITIES[ability](user, team)


def authorize(request, team: Team, ability: str) -> None:
    """Raise PermissionDeniedError (403) unless the user may perform `ability` on `team`."""
    if allows(request.user, team, ability):
        return
    SecurityAuditLogger.log_permission_denied(
        request.user, request, resource=f"team:{team.slug}", action=ability
    )
    raise PermissionDeniedError("This action is unauthorized.")
