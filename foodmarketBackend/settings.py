"""
Django settings for foodmarketBackend project.

Every deployment-specific value is read from the environment.
"""

import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name: str, default: bool = False) -> bool:
    return os.environ.get(name, str(default)).lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.environ.get("SECRET_KEY")
if not SECRET_KEY:
    raise RuntimeError("SECRET_KEY environment variable is required")

DEBUG = env_bool("DEBUG", False)

ALLOWED_HOSTS = [host.strip() for host in os.environ.get("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if host.strip()]


# Application definition

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "marketplace.apps.MarketplaceConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "foodmarketBackend.urls"

ASGI_APPLICATION = "foodmarketBackend.asgi.application"


# Database

DB_ENGINE = os.environ.get("DB_ENGINE", "sqlite3")

if DB_ENGINE == "sqlite3":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": os.environ.get("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": f"django.db.backends.{DB_ENGINE}",
            "NAME": os.environ.get("DB_NAME", "foodmarket"),
            "USER": os.environ.get("DB_USER", ""),
            "PASSWORD": os.environ.get("DB_PASSWORD", ""),
            "HOST": os.environ.get("DB_HOST", "localhost"),
            "PORT": os.environ.get("DB_PORT", ""),
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# Internationalization

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.environ.get("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True


# Redis

REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")


# Infrastructure backends

INFRASTRUCTURE = {
    # 'event_bus' publishes notification.<template> events, 'mock' records them in memory
    "NOTIFIER_BACKEND": os.environ.get("NOTIFIER_BACKEND", "event_bus"),
    # 'redis' or 'memory'
    "EVENT_BUS_BACKEND": os.environ.get("EVENT_BUS_BACKEND", "redis"),
}


# Marketplace engine

MARKETPLACE = {
    # 'django' or 'memory'
    "PERSISTENCE_BACKEND": os.environ.get("PERSISTENCE_BACKEND", "django"),
    "CONFLICT_RETRY_ATTEMPTS": int(os.environ.get("CONFLICT_RETRY_ATTEMPTS", "3")),
    "DISCOVERY_DEFAULT_PAGE_SIZE": int(os.environ.get("DISCOVERY_DEFAULT_PAGE_SIZE", "20")),
    "DISCOVERY_MAX_PAGE_SIZE": int(os.environ.get("DISCOVERY_MAX_PAGE_SIZE", "100")),
    "TRACING_ENABLED": env_bool("TRACING_ENABLED", False),
    "SERVICE_NAME": os.environ.get("OTEL_SERVICE_NAME", "marketplace-engine"),
}


# Logging

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name} {message}",
            "style": "{",
        },
        "simple": {
            "format": "{levelname} {message}",
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
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "marketplace": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
        "infrastructure": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}
