"""
Management command: mark finished subscriptions as expired.

- cancelled subscriptions whose grace period (ends_at) is over
- pending subscriptions older than BILLING_PENDING_TTL_HOURS
  (the 3-D Secure confirmation never came)

Expired subscriptions free the team for a new one.
"""

from __future__ import annotations

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.billing import services


class Command(BaseCommand):
    help = "Expires cancelled subscriptions past their grace period and stale pending ones."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be expired without changing the database.",
        )

    def handle(self, *args, **options):
        now = timezone.now()

        if options["dry_run"]:
            ended = services.ended_subscriptions(now).select_related("team", "plan")
            self.stdout.write(self.style.WARNING("DRY RUN: nothing will be changed"))
            for sub in ended:
                self.stdout.write(f"[DRY RUN] team={sub.team.slug} plan={sub.plan.code} status={sub.status}")
            self.stdout.write(f"Would expire: {len(ended)}")
            return

        count = services.expire_ended_subscriptions(now)
        self.stdout.write(self.style.SUCCESS(f"Expired: {count}"))
