# fleet_backend/settings.py
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

# .env at the repository root, shared with common.config
load_dotenv(BASE_DIR.parent / ".env")

# -------------------------
# Security / mode
# -------------------------
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "django-insecure-fleet-dev-key")
DEBUG = os.getenv("DEBUG", "False").lower() == "true"

ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "127.0.0.1,localhost,testserver").split(",") if h.strip()]

# -------------------------
# Apps
# -------------------------
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",

    "rest_framework",

    "fleet.apps.FleetConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "fleet_backend.urls"
WSGI_APPLICATION = "fleet_backend.wsgi.application"

# -------------------------
# Database
# -------------------------
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.getenv("FLEET_DB_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

# -------------------------
# DRF
# -------------------------
# Authentication is handled upstream of this service.
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "UNAUTHENTICATED_USER": None,
    "EXCEPTION_HANDLER": "fleet.exceptions.fleet_exception_handler",
}

# -------------------------
# Fleet services
# -------------------------
# Deliver alerts on a worker pool ("1") or inline on the request thread ("0").
FLEET_ALERTS_ASYNC = os.getenv("FLEET_ALERTS_ASYNC", "1") == "1"

# -------------------------
# Logging
# -------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "django": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}
