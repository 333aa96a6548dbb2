"""
base.py: shared Django settings for every environment.

local.py / production.py / test.py start from this file and override what
differs.

RULE:
- nothing environment specific (cache backend, database host checks) lives
  here; that goes into local.py / production.py / test.py.
"""

from __future__ import annotations

from datetime import timedelta
import os
from pathlib import Path

# BASE_DIR is the backend project root (where manage.py lives)
BASE_DIR = Path(__file__).resolve().parent.parent.parent


# -----------------------------------------------------------------------------
# Security: secret key
# -----------------------------------------------------------------------------
# Read from the environment. Emptiness is checked in production.py so that
# test.py can override it.
SECRET_KEY = os.environ.get("SECRET_KEY") or os.environ.get("DJANGO_SECRET_KEY") or ""


# -----------------------------------------------------------------------------
# DEBUG
# -----------------------------------------------------------------------------
DEBUG = os.environ.get("DEBUG", "False").lower() == "true"


# -----------------------------------------------------------------------------
# Hosts
# -----------------------------------------------------------------------------
ALLOWED_HOSTS = [
    h.strip()
    for h in os.environ.get("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")
    if h.strip()
]


# -----------------------------------------------------------------------------
# Applications
# -----------------------------------------------------------------------------
DJANGO_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
]

THIRD_PARTY_APPS = [
    "rest_framework",
    "rest_framework_simplejwt",
    "rest_framework_simplejwt.token_blacklist",  # logout + refresh rotation
    "drf_spectacular",
    "django_filters",
    "corsheaders",
]

LOCAL_APPS = [
    "apps.core",
    "apps.common",
    "apps.users",
    "apps.teams",
    "apps.billing",
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS


# -----------------------------------------------------------------------------
# Middleware
# -----------------------------------------------------------------------------
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",  # Serve static files in production
    "corsheaders.middleware.CorsMiddleware",  # CORS must stay high in the list
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"


# -----------------------------------------------------------------------------
# Templates (admin only)
# -----------------------------------------------------------------------------
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]


# -----------------------------------------------------------------------------
# Database (default = PostgreSQL)
# -----------------------------------------------------------------------------
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("POSTGRES_DB", "teampay"),
        "USER": os.getenv("POSTGRES_USER", "teampay"),
        "PASSWORD": os.getenv("POSTGRES_PASSWORD", "teampay"),
        "HOST": os.getenv("POSTGRES_HOST", "db"),
        "PORT": os.getenv("POSTGRES_PORT", "5432"),
    }
}


# -----------------------------------------------------------------------------
# Cache
# -----------------------------------------------------------------------------
# No backend here on purpose: see local.py / production.py / test.py
CACHES = {}


# -----------------------------------------------------------------------------
# Passwords
# -----------------------------------------------------------------------------
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        "OPTIONS": {"min_length": 6},
    },
]


# -----------------------------------------------------------------------------
# Internationalization
# -----------------------------------------------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True


# -----------------------------------------------------------------------------
# Static
# -----------------------------------------------------------------------------
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Behind nginx: build links with the forwarded host
USE_X_FORWARDED_HOST = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# -----------------------------------------------------------------------------
# Proxies (client IP for audit logs and the webhook allowlist)
# -----------------------------------------------------------------------------
TRUSTED_PROXIES_ENABLED = os.environ.get("TRUSTED_PROXIES_ENABLED", "False").lower() == "true"
TRUSTED_PROXIES = [
    p.strip() for p in os.environ.get("TRUSTED_PROXIES", "").split(",") if p.strip()
]


# -----------------------------------------------------------------------------
# Django REST Framework
# -----------------------------------------------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 30,
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
    ],
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.FormParser",
    ],
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    # Throttling = abuse protection
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
    ],
    # Scope names must match apps/*/throttles.py
    "DEFAULT_THROTTLE_RATES": {
        "anon": "500/hour",
        "user": "5000/hour",
        # Auth
        "register": "3/hour",
        "login": "10/minute",
        "password_change": "3/hour",
        # Billing
        "subscription_change": "20/hour",
        "billing_webhook": "100/hour",
    },
    # One error format for every client
    "EXCEPTION_HANDLER": "apps.core.exception_handler.custom_exception_handler",
    "DATETIME_FORMAT": "%Y-%m-%dT%H:%M:%S%z",
    "DATE_FORMAT": "%Y-%m-%d",
    "TIME_FORMAT": "%H:%M:%S",
}


# -----------------------------------------------------------------------------
# OpenAPI (Swagger)
# -----------------------------------------------------------------------------
SPECTACULAR_SETTINGS = {
    "TITLE": "TeamPay REST API",
    "DESCRIPTION": "Teams, memberships, team subscriptions and invoices",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "SCHEMA_PATH_PREFIX": r"/api/v1/",
    "COMPONENT_SPLIT_REQUEST": True,
}


# -----------------------------------------------------------------------------
# CORS
# -----------------------------------------------------------------------------
CORS_ALLOW_ALL_ORIGINS = False
CORS_ALLOW_CREDENTIALS = True
CORS_ALLOWED_ORIGINS = [
    o.strip() for o in os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",") if o.strip()
]

CORS_ALLOW_METHODS = ["DELETE", "GET", "OPTIONS", "PATCH", "POST", "PUT"]
CORS_ALLOW_HEADERS = [
    "accept",
    "accept-encoding",
    "authorization",
    "content-type",
    "dnt",
    "origin",
    "user-agent",
    "x-csrftoken",
    "x-requested-with",
]


# -----------------------------------------------------------------------------
# Billing (YooKassa)
# -----------------------------------------------------------------------------
YOOKASSA_SHOP_ID = os.environ.get("YOOKASSA_SHOP_ID", "")
YOOKASSA_SECRET_KEY = os.environ.get("YOOKASSA_SECRET_KEY", "")
# Where YooKassa sends the customer back after 3-D Secure
BILLING_RETURN_URL = os.environ.get("BILLING_RETURN_URL", "")
# Plan code that means "no paid subscription"
BILLING_FREE_PLAN_CODE = os.environ.get("BILLING_FREE_PLAN_CODE", "free")
BILLING_VENDOR_NAME = os.environ.get("BILLING_VENDOR_NAME", "TeamPay")
BILLING_CURRENCY = os.environ.get("BILLING_CURRENCY", "RUB")
# Pending first charges older than this are expired by expire_subscriptions
BILLING_PENDING_TTL_HOURS = int(os.environ.get("BILLING_PENDING_TTL_HOURS", "24"))


# -----------------------------------------------------------------------------
# JWT
# -----------------------------------------------------------------------------
SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=60),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=14),
    "ROTATE_REFRESH_TOKENS": True,
    "BLACKLIST_AFTER_ROTATION": True,
    "ALGORITHM": "HS256",
    "SIGNING_KEY": SECRET_KEY,
    "AUTH_HEADER_TYPES": ("Bearer",),
}

# What local/production/test may import from base.py.
__all__ = [
    "BASE_DIR",
    "SECRET_KEY",
    "DEBUG",
    "ALLOWED_HOSTS",
    "INSTALLED_APPS",
    "MIDDLEWARE",
    "ROOT_URLCONF",
    "WSGI_APPLICATION",
    "TEMPLATES",
    "DATABASES",
    "CACHES",
    "AUTH_PASSWORD_VALIDATORS",
    "REST_FRAMEWORK",
    "LANGUAGE_CODE",
    "TIME_ZONE",
    "USE_I18N",
    "USE_TZ",
    "STATIC_URL",
    "STATIC_ROOT",
    "USE_X_FORWARDED_HOST",
    "DEFAULT_AUTO_FIELD",
    "TRUSTED_PROXIES_ENABLED",
    "TRUSTED_PROXIES",
    "SPECTACULAR_SETTINGS",
    "CORS_ALLOW_ALL_ORIGINS",
    "CORS_ALLOWED_ORIGINS",
    "CORS_ALLOW_CREDENTIALS",
    "CORS_ALLOW_METHODS",
    "CORS_ALLOW_HEADERS",
    "YOOKASSA_SHOP_ID",
    "YOOKASSA_SECRET_KEY",
    "BILLING_RETURN_URL",
    "BILLING_FREE_PLAN_CODE",
    "BILLING_VENDOR_NAME",
    "BILLING_CURRENCY",
    "BILLING_PENDING_TTL_HOURS",
    "SIMPLE_JWT",
]
