"""
Team operations used by the team views and by billing.
"""

import logging

from django.db import transaction
from django.shortcuts import get_object_or_404

from apps.users.models import Profile

from .models import Team, TeamMember
from .signals import team_created, team_deleted, team_updated

logger = logging.getLogger(__name__)


def get_team_or_404(slug: str) -> Team:
    """Live team by slug; Http404 (rendered as 404) otherwise."""
    return get_object_or_404(Team, slug=slug)


def teams_for_user(user):
    return Team.objects.filter(memberships__user=user).distinct().order_by('name')


@transaction.atomic
def create_team(user, name: str) -> Team:
    """
    Create a team owned by `user`.

    The creator joins as owner; the team becomes the active team when the
    user has none yet.
    """
    team = Team.objects.create(name=name, owner=user)
    TeamMember.objects.create(team=team, user=user, role=TeamMember.ROLE_OWNER)

    profile = user.profile
    if profile.current_team_id is None:
        profile.current_team = team
        profile.save(update_fields=['current_team', 'updated_at'])

    logger.info("Team created: id=%s slug=%s owner_id=%s", team.id, team.slug, user.id)
    team_created.send(sender=Team, team=team, user=user)
    return team


def rename_team(team: Team, name: str, user=None) -> Team:
    team.name = name
    team.save()
    team_updated.send(sender=Team, team=team, user=user)
    return team


@transaction.atomic
def delete_team(team: Team, user=None) -> None:
    """
    Soft-delete a team. A valid paid subscription is cancelled first.

    Members that had this team active get it cleared.
    """
    # Imported here: billing depends on teams
    from apps.billing.services import cancel_team_billing

    cancel_team_billing(team)

    team.soft_delete()

    Profile.objects.filter(current_team=team).update(current_team=None)

    logger.info("Team deleted: id=%s slug=%s", team.id, team.slug)
    team_deleted.send(sender=Team, team=team, user=user)


def switch_current_team(user, team: Team) -> None:
    profile = user.profile
    profile.current_team = team
    profile.save(update_fields=['current_team', 'updated_at'])
