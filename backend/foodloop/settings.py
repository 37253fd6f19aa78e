"""
Django settings for the FoodLoop backend.

Everything environment-specific is read from env vars with development-safe
defaults. DJANGO_ENV selects the profile (local / staging / production).
"""

import os
from pathlib import Path
from celery.schedules import crontab

LOG_JSON = os.getenv("LOG_JSON", "1") == "1"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# this file lives at backend/foodloop/settings.py; BASE_DIR points to /backend
BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-unsafe")
DEBUG = os.getenv("DJANGO_DEBUG", "0") == "1"
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]
CSRF_TRUSTED_ORIGINS = [o.strip() for o in os.getenv("CSRF_TRUSTED_ORIGINS", "").split(",") if o.strip()]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # project apps
    "accounts",
    "audit",
    "geo.apps.GeoConfig",  # builds the shared geocoder / router at startup
    "notifications",
    "donations",
    "ops",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "ops.middleware.RequestLogMiddleware",
]

# Templates (needed for Django admin)
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",   # admin needs this
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

ROOT_URLCONF = "foodloop.urls"
WSGI_APPLICATION = "foodloop.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.mysql",
        "NAME": os.getenv("MYSQL_DATABASE", "foodloop"),
        "USER": os.getenv("MYSQL_USER", "foodloop"),
        "PASSWORD": os.getenv("MYSQL_PASSWORD", "foodloop"),
        "HOST": os.getenv("DB_HOST", "127.0.0.1"),
        "PORT": int(os.getenv("DB_PORT", "3306")),
        "OPTIONS": {
            "charset": "utf8mb4",
            "use_unicode": True,
        },
    }
}

# Shared across web workers so geocode / route memoization is not per-process
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": os.getenv("CACHE_REDIS_URL", "redis://127.0.0.1:6379/2"),
        "KEY_PREFIX": "foodloop",
    }
}

AUTH_USER_MODEL = "accounts.User"
AUTHENTICATION_BACKENDS = ["django.contrib.auth.backends.ModelBackend"]

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "Asia/Colombo")
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

ADMIN_URL = os.getenv("ADMIN_URL", "admin")

DEFAULT_FROM_EMAIL = os.getenv("DEFAULT_FROM_EMAIL", "FoodLoop <no-reply@foodloop.local>")
EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "django.core.mail.backends.smtp.EmailBackend")

# --- Business rules ---
# Inclusive bounding box every client-supplied coordinate is checked against.
FOODLOOP_SERVICE_REGION = {
    "min_lat": float(os.getenv("SERVICE_REGION_MIN_LAT", "5")),
    "max_lat": float(os.getenv("SERVICE_REGION_MAX_LAT", "10")),
    "min_lng": float(os.getenv("SERVICE_REGION_MIN_LNG", "79")),
    "max_lng": float(os.getenv("SERVICE_REGION_MAX_LNG", "82")),
}
FOODLOOP_DRIVER_SERVICE_RADIUS_KM = float(os.getenv("DRIVER_SERVICE_RADIUS_KM", "40"))
FOODLOOP_EXPIRY_WARNING_WINDOW_HOURS = (
    int(os.getenv("EXPIRY_WARNING_FROM_HOURS", "1")),
    int(os.getenv("EXPIRY_WARNING_TO_HOURS", "2")),
)
FOODLOOP_METHANE_FACTOR = os.getenv("METHANE_FACTOR", "0.05")
FOODLOOP_REQUIRE_ACCEPT_ORDER = os.getenv("REQUIRE_ACCEPT_ORDER", "0") == "1"

HEARTBEAT_MAX_AGE_SECONDS = int(os.getenv("HEARTBEAT_MAX_AGE_SECONDS", "180"))

# --- Geo ---
GEOCODER_USER_AGENT = os.getenv("GEOCODER_USER_AGENT", "FoodLoop-App/1.0")
GEOCODER_COUNTRY_CODES = os.getenv("GEOCODER_COUNTRY_CODES", "lk")
GEOCODER_COUNTRY_SUFFIX = os.getenv("GEOCODER_COUNTRY_SUFFIX", "Sri Lanka")
GEOCODER_MIN_DELAY_SECONDS = float(os.getenv("GEOCODER_MIN_DELAY_SECONDS", "1.0"))
GEOCODER_TIMEOUT_SECONDS = float(os.getenv("GEOCODER_TIMEOUT_SECONDS", "10"))
ROUTING_BASE_URL = os.getenv("ROUTING_BASE_URL", "https://router.project-osrm.org")
ROUTING_TIMEOUT_SECONDS = float(os.getenv("ROUTING_TIMEOUT_SECONDS", "5"))
ROUTING_CACHE_TTL_SECONDS = int(os.getenv("ROUTING_CACHE_TTL_SECONDS", "300"))

# --- Notifications ---
NOTIFICATION_PROVIDER = (os.getenv("NOTIFICATION_PROVIDER") or "mock").lower()
NOTIFICATION_WEBHOOK_URL = os.getenv("NOTIFICATION_WEBHOOK_URL", "")
NOTIFICATION_WEBHOOK_TOKEN = os.getenv("NOTIFICATION_WEBHOOK_TOKEN", "")

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/1")
CELERY_TIMEZONE = TIME_ZONE

CELERY_BEAT_SCHEDULE = {
    "donations-delete-expired-30min": {
        "task": "donations.tasks.delete_expired_donations",
        "schedule": crontab(minute="*/30"),
    },
    "donations-expiry-warnings-hourly": {
        "task": "donations.tasks.send_expiry_warnings",
        "schedule": crontab(minute=0),
    },
    "ops-beat-heartbeat-every-1m": {
        "task": "ops.tasks.beat_heartbeat",
        "schedule": crontab(minute="*/1"),
    },
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
        # request lines are already JSON; keep the message bare
        "bare": {"format": "%(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
        "request_console": {"class": "logging.StreamHandler", "formatter": "bare" if LOG_JSON else "plain"},
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "request": {"handlers": ["request_console"], "level": LOG_LEVEL, "propagate": False},
    },
}

# ------------------------------------------------------------------------------
# Environment profile
# ------------------------------------------------------------------------------
DJANGO_ENV = (os.getenv("DJANGO_ENV") or "local").lower()

if DJANGO_ENV == "local":
    DEBUG = True
elif DJANGO_ENV in {"staging", "production"}:
    DEBUG = False
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True
    SECURE_SSL_REDIRECT = True
    SECURE_HSTS_SECONDS = 3600
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_PRELOAD = True
