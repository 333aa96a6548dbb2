"""
Subscription events.

All of them carry `team` and `subscription` keyword arguments.
"""

from django.dispatch import Signal

subscription_created = Signal()
subscription_swapped = Signal()
subscription_cancelled = Signal()
subscription_resumed = Signal()
