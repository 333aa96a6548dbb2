"""
Throttling (rate limiting) classes for user authentication endpoints.

Protects against brute force attacks and abuse.
Rates live in REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'] under each scope.
"""

from rest_framework.throttling import AnonRateThrottle, SimpleRateThrottle, UserRateThrottle


class RegisterThrottle(AnonRateThrottle):
    """
    Throttle for registration endpoint, per IP address.
    Prevents automated account creation and spam.
    """
    scope = 'register'


class LoginThrottle(SimpleRateThrottle):
    """
    Throttle for login and token refresh, per IP address.

    Authenticated requests are not throttled here.
    """
    scope = 'login'

    def get_cache_key(self, request, view):
        if request.user and request.user.is_authenticated:
            return None

        return self.cache_format % {
            'scope': self.scope,
            'ident': self.get_ident(request)
        }


class PasswordChangeThrottle(UserRateThrottle):
    """
    Throttle for password change endpoint, per user.
    """
    scope = 'password_change'
