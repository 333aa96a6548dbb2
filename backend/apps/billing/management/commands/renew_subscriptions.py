"""
Management command: renew active subscriptions whose paid period ended.

For every active, auto-renewing subscription with current_period_end in
the past:
- charge the saved YooKassa payment method with the plan price
- on success start a new period
- on failure cancel the subscription without a grace period

Run from cron, e.g. hourly. Each subscription is handled in its own
transaction with the row locked, so parallel runs do not double-charge.
"""

from __future__ import annotations

import logging

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.billing import services

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Charges saved payment methods of subscriptions whose period ended."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be renewed without charging anyone.",
        )
        parser.add_argument(
            "--limit",
            type=int,
            default=500,
            help="Maximum number of subscriptions per run. Default: 500.",
        )

    def handle(self, *args, **options):
        dry_run: bool = options["dry_run"]
        limit: int = options["limit"]
        now = timezone.now()

        due = services.due_for_renewal(now).select_related("team", "plan")[:limit]
        due = list(due)

        self.stdout.write(f"Subscriptions due for renewal: {len(due)}")
        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN: nothing will be charged"))
            for sub in due:
                self.stdout.write(
                    f"[DRY RUN] team={sub.team.slug} plan={sub.plan.code} "
                    f"period_end={sub.current_period_end.isoformat()}"
                )
            return

        renewed = 0
        failed = 0
        for sub in due:
            if services.renew_subscription(sub.id, now=now):
                renewed += 1
                self.stdout.write(self.style.SUCCESS(f"renewed team={sub.team.slug} plan={sub.plan.code}"))
            else:
                failed += 1
                self.stdout.write(self.style.ERROR(f"not renewed team={sub.team.slug} plan={sub.plan.code}"))

        logger.info("Renewal run finished: renewed=%s failed=%s", renewed, failed)
        self.stdout.write(self.style.SUCCESS(f"Renewed: {renewed}"))
        if failed:
            self.stdout.write(self.style.WARNING(f"Not renewed: {failed}"))
