"""
Django settings for core project.

Values that differ between environments are read from environment variables.
Gateway credentials live under DATATRANS and are parsed once into
apps.payments.providers.datatrans.config.GatewayConfig.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "django-insecure-dev-only-change-me")

DEBUG = env_bool("DJANGO_DEBUG", False)

ALLOWED_HOSTS = [h for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h]


INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "rest_framework",
    "config.dictionaries",
    "apps.orders",
    "apps.payments",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
]

ROOT_URLCONF = "core.urls"

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

DATABASES = {
    "default": {
        "ENGINE": os.environ.get("DB_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.environ.get("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": os.environ.get("DB_USER", ""),
        "PASSWORD": os.environ.get("DB_PASSWORD", ""),
        "HOST": os.environ.get("DB_HOST", ""),
        "PORT": os.environ.get("DB_PORT", ""),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.FormParser",
        "rest_framework.parsers.MultiPartParser",
    ],
}


# Datatrans (offsite card payments)
DATATRANS = {
    "MERCHANT_ID": os.environ.get("DATATRANS_MERCHANT_ID", ""),
    "SERVICE_URL": os.environ.get("DATATRANS_SERVICE_URL", "https://pilot.datatrans.biz/upp/jsp/upStart.jsp"),
    "REQUEST_TYPE": os.environ.get("DATATRANS_REQUEST_TYPE", "CAA"),
    "USE_ALIAS": env_bool("DATATRANS_USE_ALIAS", False),
    "SECURITY_LEVEL": int(os.environ.get("DATATRANS_SECURITY_LEVEL", "2")),
    "SIGN": os.environ.get("DATATRANS_SIGN", ""),
    "HMAC_KEYS": [k for k in os.environ.get("DATATRANS_HMAC_KEYS", "").split(",") if k],
    "API_URL": os.environ.get("DATATRANS_API_URL", "https://api.sandbox.datatrans.com"),
    "API_PASSWORD": os.environ.get("DATATRANS_API_PASSWORD", ""),
    "RETURN_SUCCESS_URL": os.environ.get("DATATRANS_RETURN_SUCCESS_URL", "/checkout/complete/"),
    "RETURN_FAILURE_URL": os.environ.get("DATATRANS_RETURN_FAILURE_URL", "/checkout/payment/"),
}


LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "apps": {
            "level": os.environ.get("DJANGO_LOG_LEVEL", "INFO"),
        },
    },
}
