"""
local.py: settings for development on your own machine.

In short:
- DEBUG is on
- SQLite database (simplest start)
- in-memory cache (no Redis)
- localhost frontends allowed by CORS
"""

from __future__ import annotations

from . import base

DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1", ".ngrok-free.dev"]

CORS_ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
]

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "teampay-local-cache",
        "OPTIONS": {"MAX_ENTRIES": 10000},
    }
}

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": base.BASE_DIR / "db.sqlite3",
    }
}

# Browsable API is handy for debugging in the browser
REST_FRAMEWORK = {**base.REST_FRAMEWORK}
REST_FRAMEWORK["DEFAULT_RENDERER_CLASSES"] = [
    "rest_framework.renderers.JSONRenderer",
    "rest_framework.renderers.BrowsableAPIRenderer",
]

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "console": {"class": "logging.StreamHandler"},
    },
    "root": {"handlers": ["console"], "level": "DEBUG"},
    "loggers": {
        "django.db.backends": {"level": "INFO"},
        "security": {"handlers": ["console"], "level": "INFO", "propagate": False},
    },
}


# --- Everything else comes from base.py (no star import) ---
# Django reads module-level names, so each one is re-exported explicitly.
BASE_DIR = base.BASE_DIR
SECRET_KEY = base.SECRET_KEY or "local-dev-secret-key-not-for-production"

INSTALLED_APPS = base.INSTALLED_APPS
MIDDLEWARE = base.MIDDLEWARE
ROOT_URLCONF = base.ROOT_URLCONF
WSGI_APPLICATION = base.WSGI_APPLICATION
TEMPLATES = base.TEMPLATES
AUTH_PASSWORD_VALIDATORS = base.AUTH_PASSWORD_VALIDATORS

LANGUAGE_CODE = base.LANGUAGE_CODE
TIME_ZONE = base.TIME_ZONE
USE_I18N = base.USE_I18N
USE_TZ = base.USE_TZ

STATIC_URL = base.STATIC_URL
STATIC_ROOT = base.STATIC_ROOT
USE_X_FORWARDED_HOST = base.USE_X_FORWARDED_HOST

DEFAULT_AUTO_FIELD = base.DEFAULT_AUTO_FIELD
SPECTACULAR_SETTINGS = base.SPECTACULAR_SETTINGS

TRUSTED_PROXIES_ENABLED = base.TRUSTED_PROXIES_ENABLED
TRUSTED_PROXIES = base.TRUSTED_PROXIES

CORS_ALLOW_ALL_ORIGINS = base.CORS_ALLOW_ALL_ORIGINS
CORS_ALLOW_CREDENTIALS = base.CORS_ALLOW_CREDENTIALS
CORS_ALLOW_METHODS = base.CORS_ALLOW_METHODS
CORS_ALLOW_HEADERS = base.CORS_ALLOW_HEADERS

YOOKASSA_SHOP_ID = base.YOOKASSA_SHOP_ID
YOOKASSA_SECRET_KEY = base.YOOKASSA_SECRET_KEY
BILLING_RETURN_URL = base.BILLING_RETURN_URL or "http://localhost:5173/billing/return"
BILLING_FREE_PLAN_CODE = base.BILLING_FREE_PLAN_CODE
BILLING_VENDOR_NAME = base.BILLING_VENDOR_NAME
BILLING_CURRENCY = base.BILLING_CURRENCY
BILLING_PENDING_TTL_HOURS = base.BILLING_PENDING_TTL_HOURS

SIMPLE_JWT = {**base.SIMPLE_JWT, "SIGNING_KEY": SECRET_KEY}
