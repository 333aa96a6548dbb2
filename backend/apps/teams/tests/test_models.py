import pytest

from apps.teams.models import Team


@pytest.mark.django_db
class TestTeamSlug:

    def test_slug_follows_name(self, user):
        team = Team.objects.create(name="Acme Rockets", owner=user)

        assert team.slug == "acme-rockets"

    def test_duplicate_names_get_suffixes(self, user):
        first = Team.objects.create(name="Acme", owner=user)
        second = Team.objects.create(name="Acme", owner=user)
        third = Team.objects.create(name="acme", owner=user)

        assert [first.slug, second.slug, third.slug] == ["acme", "acme-2", "acme-3"]

    def test_rename_regenerates_slug(self, user):
        team = Team.objects.create(name="Acme", owner=user)

        team.name = "Globex"
        team.save(update_fields=["name", "updated_at"])
        team.refresh_from_db()

        assert team.slug == "globex"

    def test_resave_without_rename_keeps_slug(self, user):
        Team.objects.create(name="Acme", owner=user)
        team = Team.objects.create(name="Acme", owner=user)

        team.save()

        assert team.slug == "acme-2"

    def test_deleted_team_still_reserves_slug(self, user):
        old = Team.objects.create(name="Acme", owner=user)
        old.soft_delete()

        new = Team.objects.create(name="Acme", owner=user)

        assert new.slug == "acme-2"
        assert list(Team.objects.all()) == [new]
        assert Team.all_objects.count() == 2

    def test_unsluggable_name(self, user):
        team = Team.objects.create(name="!!!", owner=user)

        assert team.slug == "team"


@pytest.mark.django_db
class TestTeamBillingHelpers:

    def test_no_subscription(self, team):
        assert team.current_subscription() is None
        assert team.subscribed() is False
        assert team.has_payment_method() is False

    def test_paid_active_subscription(self, team, plans):
        team.subscriptions.create(plan=plans["pro"], status="active", payment_method_id="pm-1")

        assert team.subscribed() is True
        assert team.has_payment_method() is True

    def test_free_plan_is_not_subscribed(self, team, plans):
        team.subscriptions.create(plan=plans["free"], status="active")

        assert team.subscribed() is False
