"""
Base Django settings for CredentialService.

These settings are shared across all environments.
Environment-specific overrides are in dev.py, test.py, and prod.py
"""
import os
from datetime import timedelta
from pathlib import Path

from celery.schedules import crontab

from CredentialService.settings.logging import get_logging_config
from core.domain.value_objects import TokenType

# Build paths inside the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get(
    "SECRET_KEY", "django-insecure-0v9#k2n!c7s@credential-service-dev-only"
)

# Application definition
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    # Local apps
    "CredentialService.apps.CredentialServiceConfig",
    "core",
    "accounts",
    "licenses",
    "verification",
    "two_factor",
]

AUTH_USER_MODEL = "accounts.User"

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    # Custom middleware
    "core.middleware.rate_limit.RateLimitMiddleware",
]

ROOT_URLCONF = "CredentialService.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
            ],
        },
    },
]

WSGI_APPLICATION = "CredentialService.wsgi.application"
ASGI_APPLICATION = "CredentialService.asgi.application"

# Database
# https://docs.djangoproject.com/en/4.2/ref/settings/#databases
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.environ.get("DB_NAME", "credential_service"),
        "USER": os.environ.get("DB_USER", "postgres"),
        "PASSWORD": os.environ.get("DB_PASSWORD", "postgres"),
        "HOST": os.environ.get("DB_HOST", "localhost"),
        "PORT": os.environ.get("DB_PORT", "5432"),
        "OPTIONS": {
            "connect_timeout": 10,
        },
    }
}

# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Redis Cache
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": os.environ.get("REDIS_URL", "redis://127.0.0.1:6379/1"),
        "OPTIONS": {
            "socket_connect_timeout": 5,
            "socket_timeout": 5,
        },
    }
}

# Email
EMAIL_BACKEND = "django.core.mail.backends.smtp.EmailBackend"
EMAIL_HOST = os.environ.get("EMAIL_HOST", "localhost")
EMAIL_PORT = int(os.environ.get("EMAIL_PORT", "587"))
EMAIL_HOST_USER = os.environ.get("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = os.environ.get("EMAIL_HOST_PASSWORD", "")
EMAIL_USE_TLS = os.environ.get("EMAIL_USE_TLS", "true").lower() == "true"
DEFAULT_FROM_EMAIL = os.environ.get("DEFAULT_FROM_EMAIL", "no-reply@localhost")

# Licenses
LICENSE_KEY_MAX_ATTEMPTS = 3
LICENSE_EXPIRY_WARNING_DAYS = [7, 1]

# Verification tokens
VERIFICATION_TOKEN_TTL = {
    TokenType.EMAIL_VERIFICATION: timedelta(hours=24),
    TokenType.PASSWORD_RESET: timedelta(hours=1),
    TokenType.TWO_FACTOR_SETUP: timedelta(hours=2),
    TokenType.TWO_FACTOR_BACKUP: timedelta(hours=2),
}

# Two-factor authentication
TWO_FACTOR_ISSUER = os.environ.get("TWO_FACTOR_ISSUER", "Credential Service")
TWO_FACTOR_BACKUP_CODE_COUNT = 10
TWO_FACTOR_VALID_WINDOW = 1

# Rate limiting: path prefix -> (requests, window seconds)
RATE_LIMITS = {
    "/api/auth/": (10, 60),
    "/api/license/validate": (60, 60),
    "/api/": (100, 60),
}

# Celery
CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://127.0.0.1:6379/0")
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TIMEZONE = TIME_ZONE
CELERY_BEAT_SCHEDULE = {
    "sweep-expired-licenses": {
        "task": "core.tasks.sweep_expired_licenses",
        "schedule": crontab(minute=0),
    },
    "sweep-expired-tokens": {
        "task": "core.tasks.sweep_expired_tokens",
        "schedule": crontab(minute=30),
    },
    "notify-expiring-licenses": {
        "task": "core.tasks.notify_expiring_licenses",
        "schedule": crontab(hour=9, minute=0),
    },
}

# Observability
LOGGING = get_logging_config(os.environ.get("ENVIRONMENT", "development"))
