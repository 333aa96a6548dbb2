"""
billing/throttles.py

Rate limiting for billing endpoints.

- webhook: by IP (YooKassa must get through, floods must not)
- subscription changes: by user, every call may charge a card

Rates live in REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'].
"""

from __future__ import annotations

from rest_framework.throttling import SimpleRateThrottle


class WebhookThrottle(SimpleRateThrottle):
    """
    Throttle for the webhook endpoint, keyed by IP.
    """
    scope = "billing_webhook"

    def get_cache_key(self, request, view):
        ident = self.get_ident(request)
        if not ident:
            return None
        return self.cache_format % {"scope": self.scope, "ident": ident}


class SubscriptionChangeThrottle(SimpleRateThrottle):
    """
    Throttle for subscribe / cancel / resume.

    Authenticated users are keyed by id, anything else by IP.
    """
    scope = "subscription_change"

    def get_cache_key(self, request, view):
        user = getattr(request, "user", None)

        if user and user.is_authenticated:
            ident = f"user:{user.id}"
        else:
            ident = self.get_ident(request)

        if not ident:
            return None

        return self.cache_format % {"scope": self.scope, "ident": ident}
