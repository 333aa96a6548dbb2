"""
Account events.

Receivers get `sender` (the class that sent it) plus keyword arguments.
"""

from django.dispatch import Signal

# kwargs: user, request
user_created = Signal()
