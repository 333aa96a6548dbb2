"""
Tests for the team endpoints: scopes, roles, CRUD and team switching.
"""

import pytest
from rest_framework import status

from apps.billing.models import Subscription
from apps.teams.models import Team, TeamMember
from apps.teams.signals import team_created, team_deleted, team_updated

TEAMS_URL = "/api/v1/teams/"


def detail_url(slug):
    return f"/api/v1/teams/{slug}/"


@pytest.mark.django_db
class TestTeamScopes:

    def test_list_requires_view_teams(self, client_for, user, team):
        client = client_for(user, scopes=["manage-teams"])

        response = client.get(TEAMS_URL)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error"]["code"] == "FORBIDDEN"

    def test_create_requires_manage_teams(self, client_for, user):
        client = client_for(user, scopes=["view-teams"])

        response = client.post(TEAMS_URL, {"name": "Acme"}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not Team.objects.exists()

    def test_update_requires_manage_teams(self, client_for, user, team):
        client = client_for(user, scopes=["view-teams"])

        response = client.put(detail_url("acme"), {"name": "Globex"}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        team.refresh_from_db()
        assert (team.name, team.slug) == ("Acme", "acme")

    def test_delete_requires_manage_teams(self, client_for, user, team):
        client = client_for(user, scopes=["view-teams"])

        response = client.delete(detail_url("acme"))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        team.refresh_from_db()
        assert team.deleted_at is None
        assert Team.objects.filter(pk=team.pk).exists()

    def test_scoped_token_works(self, client_for, user, team):
        client = client_for(user, scopes=["view-teams"])

        response = client.get(TEAMS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert [t["slug"] for t in response.data] == ["acme"]

    def test_anonymous_is_401(self, api_client):
        response = api_client.get(TEAMS_URL)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestTeamCrud:

    def test_create_team(self, auth_client, user):
        received = []
        team_created.connect(lambda sender, team, **kw: received.append(team.slug), weak=False,
                             dispatch_uid="test_create_team")
        try:
            response = auth_client.post(TEAMS_URL, {"name": "  Acme Rockets "}, format="json")
        finally:
            team_created.disconnect(dispatch_uid="test_create_team")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["name"] == "Acme Rockets"
        assert response.data["slug"] == "acme-rockets"
        assert response.data["owner_id"] == user.id
        assert received == ["acme-rockets"]

        team = Team.objects.get(slug="acme-rockets")
        assert TeamMember.objects.get(team=team, user=user).role == "owner"
        user.profile.refresh_from_db()
        assert user.profile.current_team_id == team.id

    def test_second_team_keeps_current_team(self, auth_client, user, team):
        auth_client.post(TEAMS_URL, {"name": "Globex"}, format="json")

        user.profile.refresh_from_db()
        assert user.profile.current_team_id == team.id

    def test_blank_name_is_422(self, auth_client):
        response = auth_client.post(TEAMS_URL, {"name": "   "}, format="json")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data["error"]["details"]["name"] == ["The name field is required."]

    def test_missing_name_is_422(self, auth_client):
        response = auth_client.post(TEAMS_URL, {}, format="json")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data["error"]["details"]["name"] == ["The name field is required."]

    def test_list_only_own_teams(self, auth_client, team, make_user, make_team):
        make_team(make_user(), "Other")

        response = auth_client.get(TEAMS_URL)

        assert [t["name"] for t in response.data] == ["Acme"]

    def test_show_team(self, auth_client, team):
        response = auth_client.get(detail_url("acme"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == team.id

    def test_show_unknown_team_is_404(self, auth_client):
        response = auth_client.get(detail_url("missing"))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error"]["code"] == "NOT_FOUND"

    def test_non_member_cannot_view(self, client_for, team, make_user):
        response = client_for(make_user()).get(detail_url("acme"))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error"]["message"] == "This action is unauthorized."

    def test_rename_regenerates_slug(self, auth_client, team):
        updated = []
        team_updated.connect(lambda sender, team, **kw: updated.append(team.slug), weak=False,
                             dispatch_uid="test_rename")
        try:
            response = auth_client.put(detail_url("acme"), {"name": "Globex"}, format="json")
        finally:
            team_updated.disconnect(dispatch_uid="test_rename")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["slug"] == "globex"
        assert updated == ["globex"]
        assert auth_client.get(detail_url("acme")).status_code == status.HTTP_404_NOT_FOUND

    def test_plain_member_cannot_rename(self, client_for, team, make_user, add_member):
        member = make_user()
        add_member(team, member)

        response = client_for(member).put(detail_url("acme"), {"name": "Hijack"}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        team.refresh_from_db()
        assert team.name == "Acme"

    def test_admin_can_rename_but_not_delete(self, client_for, team, make_user, add_member):
        admin = make_user()
        add_member(team, admin, role="admin")
        client = client_for(admin)

        assert client.patch(detail_url("acme"), {"name": "Acme Two"}, format="json").status_code == 200
        assert client.delete(detail_url("acme-two")).status_code == status.HTTP_403_FORBIDDEN

    def test_delete_team(self, auth_client, user, team, make_user, add_member):
        member = make_user()
        add_member(team, member)
        member.profile.current_team = team
        member.profile.save()

        response = auth_client.delete(detail_url("acme"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"message": "Team deleted."}
        assert not Team.objects.filter(pk=team.pk).exists()
        assert Team.all_objects.get(pk=team.pk).deleted_at is not None
        member.profile.refresh_from_db()
        assert member.profile.current_team_id is None

    def test_delete_sends_event(self, auth_client, team):
        deleted = []
        team_deleted.connect(lambda sender, team, **kw: deleted.append(team.id), weak=False,
                             dispatch_uid="test_delete")
        try:
            auth_client.delete(detail_url("acme"))
        finally:
            team_deleted.disconnect(dispatch_uid="test_delete")

        assert deleted == [team.id]

    def test_delete_cancels_paid_subscription(self, auth_client, team, plans):
        subscription = Subscription.objects.create(
            team=team, plan=plans["pro"], status="active", payment_method_id="pm-1",
        )
        subscription.start_period()
        subscription.save()

        response = auth_client.delete(detail_url("acme"))

        assert response.status_code == status.HTTP_200_OK
        subscription.refresh_from_db()
        assert subscription.status == "cancelled"
        assert subscription.auto_renew is False

    def test_delete_with_cancelled_subscription(self, auth_client, team, plans):
        Subscription.objects.create(team=team, plan=plans["pro"], status="cancelled")

        response = auth_client.delete(detail_url("acme"))

        assert response.status_code == status.HTTP_200_OK


@pytest.mark.django_db
class TestTeamSwitch:

    def test_switch_current_team(self, auth_client, user, team, make_team):
        other = make_team(user, "Globex")

        response = auth_client.post(detail_url(other.slug) + "change/")

        assert response.status_code == status.HTTP_200_OK
        user.profile.refresh_from_db()
        assert user.profile.current_team_id == other.id

    def test_cannot_switch_to_foreign_team(self, auth_client, make_user, make_team):
        foreign = make_team(make_user(), "Foreign")

        response = auth_client.post(detail_url(foreign.slug) + "change/")

        assert response.status_code == status.HTTP_403_FORBIDDEN
