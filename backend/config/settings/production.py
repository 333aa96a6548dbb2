"""
production.py: settings for the server.

In short:
- DEBUG off
- ALLOWED_HOSTS is required (Django blocks requests otherwise)
- cache = Redis (throttling counters are shared between workers)
- basic security hardening (cookies, HSTS, ...)
- JSON logs to stdout
"""

from __future__ import annotations

import os

from .base import *  # noqa

if not SECRET_KEY:  # noqa: F405
    raise ValueError("SECRET_KEY must be set in production environment")

DEBUG = os.environ.get("DEBUG", "False").lower() == "true"

_allowed_hosts_env = os.environ.get("ALLOWED_HOSTS", "").strip()
ALLOWED_HOSTS = [h.strip() for h in _allowed_hosts_env.split(",") if h.strip()]
if not ALLOWED_HOSTS:
    raise ValueError("ALLOWED_HOSTS must be set in production environment")

if not YOOKASSA_SHOP_ID or not YOOKASSA_SECRET_KEY:  # noqa: F405
    raise ValueError("YOOKASSA_SHOP_ID and YOOKASSA_SECRET_KEY must be set in production environment")


# -----------------------------------------------------------------------------
# Database: PostgreSQL with persistent connections
# -----------------------------------------------------------------------------
DATABASES["default"]["CONN_MAX_AGE"] = 600  # noqa: F405


# -----------------------------------------------------------------------------
# Cache: Redis
# -----------------------------------------------------------------------------
REDIS_URL = os.environ.get("REDIS_URL", "redis://redis:6379/1")
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": REDIS_URL,
        "KEY_PREFIX": "teampay",
        "TIMEOUT": 300,
    }
}


# -----------------------------------------------------------------------------
# Security
# -----------------------------------------------------------------------------
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

SESSION_COOKIE_SECURE = os.environ.get("SESSION_COOKIE_SECURE", "True").lower() == "true"
CSRF_COOKIE_SECURE = os.environ.get("CSRF_COOKIE_SECURE", "True").lower() == "true"

SECURE_HSTS_SECONDS = 31536000  # 1 year
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True

SECURE_CONTENT_TYPE_NOSNIFF = True
X_FRAME_OPTIONS = "DENY"

SECURE_SSL_REDIRECT = os.environ.get("SECURE_SSL_REDIRECT", "True").lower() == "true"
# Probes hit the app over plain HTTP inside the network
SECURE_REDIRECT_EXEMPT = [r"^health/$", r"^ready/$", r"^live/$"]


# -----------------------------------------------------------------------------
# CSRF: trusted origins (admin behind nginx over HTTPS)
# -----------------------------------------------------------------------------
_csrf_origins_env = os.environ.get("CSRF_TRUSTED_ORIGINS", "")
if _csrf_origins_env:
    CSRF_TRUSTED_ORIGINS = [o.strip() for o in _csrf_origins_env.split(",") if o.strip()]
else:
    CSRF_TRUSTED_ORIGINS = [f"https://{host}" for host in ALLOWED_HOSTS if host not in ["localhost", "127.0.0.1"]]


# -----------------------------------------------------------------------------
# Static files: WhiteNoise
# -----------------------------------------------------------------------------
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}


# -----------------------------------------------------------------------------
# Logs: JSON to stdout (docker-friendly)
# -----------------------------------------------------------------------------
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {"()": "apps.common.logging.JSONFormatter"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "json"},
    },
    "root": {"handlers": ["console"], "level": "INFO"},
    "loggers": {
        "django": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "security": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "apps.billing": {"handlers": ["console"], "level": "INFO", "propagate": False},
    },
}
