"""
Billing webhooks module.

Public API:
- yookassa_webhook: the only entry point for YooKassa notifications

handlers and utils are internal.
"""

from .views import yookassa_webhook

__all__ = [
    "yookassa_webhook",
]
