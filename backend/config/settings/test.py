"""
test.py: settings for the test suite.

In short:
- no PostgreSQL/Redis needed
- as fast as possible: SQLite in-memory + simple cache
"""

from __future__ import annotations

from .base import *  # noqa

# WhiteNoise is not needed in tests
MIDDLEWARE = [m for m in MIDDLEWARE if m != "whitenoise.middleware.WhiteNoiseMiddleware"]  # noqa: F405

# Override SECRET_KEY for tests (base.py allows an empty value)
SECRET_KEY = "test-secret-key-for-pytest-only-do-not-use-in-prod"  # noqa: F811
SIMPLE_JWT = {**SIMPLE_JWT, "SIGNING_KEY": SECRET_KEY}  # noqa: F405

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "teampay-test-cache",
    }
}

# Generous limits so functional tests never hit 429; throttle tests patch rates
REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    "DEFAULT_THROTTLE_RATES": {
        "anon": "10000/minute",
        "user": "10000/minute",
        "register": "10000/minute",
        "login": "10000/minute",
        "password_change": "10000/minute",
        "subscription_change": "10000/minute",
        "billing_webhook": "10000/minute",
    },
}

# Dummy credentials in the format YooKassa accepts; the gateway is mocked in tests
YOOKASSA_SHOP_ID = "123456"
YOOKASSA_SECRET_KEY = "test_secret_key_for_pytest"
BILLING_RETURN_URL = "https://teampay.test/billing/return"

# Fast password hasher for tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Logs get in the way in tests
LOGGING = {"version": 1, "disable_existing_loggers": True}
