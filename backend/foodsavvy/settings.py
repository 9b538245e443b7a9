# backend/foodsavvy/settings.py
import os
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name, default=False):
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_str(name, default=""):
    return (os.getenv(name, "") or default).strip()


SECRET_KEY = _env_str("DJANGO_SECRET_KEY", "dev-insecure-change-me")
DEBUG = _env_bool("DJANGO_DEBUG", False)
ALLOWED_HOSTS = [h.strip() for h in _env_str("DJANGO_ALLOWED_HOSTS", "*").split(",") if h.strip()]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "accounts",
    "menus",
    "delivery",
    "orders",
    "catering",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "foodsavvy.urls"
WSGI_APPLICATION = "foodsavvy.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

if _env_str("POSTGRES_DB"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": _env_str("POSTGRES_DB"),
            "USER": _env_str("POSTGRES_USER"),
            "PASSWORD": _env_str("POSTGRES_PASSWORD"),
            "HOST": _env_str("POSTGRES_HOST", "localhost"),
            "PORT": _env_str("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = _env_str("DJANGO_TIME_ZONE", "America/New_York")
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Admin image uploads (served at /uploads/)
UPLOADS_DIR = Path(_env_str("UPLOADS_DIR", str(BASE_DIR / "uploads")))
UPLOADS_URL = "/uploads/"
MAX_UPLOAD_BYTES = int(_env_str("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "EXCEPTION_HANDLER": "utils.drf_exceptions.custom_exception_handler",
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=8),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=1),
    "AUTH_HEADER_TYPES": ("Bearer",),
}

# Static admin credentials exchanged for a bearer token at /api/admin/login/
ADMIN_USERNAME = _env_str("ADMIN_USERNAME")
ADMIN_PASSWORD = _env_str("ADMIN_PASSWORD")

# Stripe
STRIPE_API_KEY = _env_str("STRIPE_SECRET_KEY") or _env_str("STRIPE_API_KEY")
STRIPE_WEBHOOK_SECRET = _env_str("STRIPE_WEBHOOK_SECRET")
STRIPE_CURRENCY = _env_str("STRIPE_CURRENCY", "usd")

# Checkout
SALES_TAX_RATE = Decimal(_env_str("SALES_TAX_RATE", "0.06625"))
CHECKOUT_ENFORCE_CAPACITY = _env_bool("CHECKOUT_ENFORCE_CAPACITY", False)

# Email
EMAIL_BACKEND = _env_str("EMAIL_BACKEND", "django.core.mail.backends.console.EmailBackend")
SENDGRID_API_KEY = _env_str("SENDGRID_API_KEY")
SENDGRID_FROM_EMAIL = _env_str("SENDGRID_FROM_EMAIL", "Food Savvy <orders@foodsavvy.app>")
SUPPORT_EMAIL = _env_str("SUPPORT_EMAIL", "orders@foodsavvy.app")
REPLY_TO_EMAIL = _env_str("REPLY_TO_EMAIL", SUPPORT_EMAIL)
EMAIL_BRAND_NAME = _env_str("EMAIL_BRAND_NAME", "Food Savvy")
FRONTEND_URL = _env_str("FRONTEND_URL", "http://localhost:5173")

LOG_LEVEL = _env_str("LOG_LEVEL", "INFO")

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
