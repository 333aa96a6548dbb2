"""
Team events.
"""

from django.dispatch import Signal

# kwargs: team, user
team_created = Signal()
team_updated = Signal()
team_deleted = Signal()
