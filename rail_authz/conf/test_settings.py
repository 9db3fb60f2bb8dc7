"""Settings used by the rail-authz test suite."""

SECRET_KEY = "rail-authz-tests"
DEBUG = False
USE_TZ = True
TIME_ZONE = "UTC"

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rail_authz",
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "rail-authz-tests",
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

RAIL_AUTHZ = {
    "provider": {"backend": "memory"},
    "rules": {"load_app_rule_files": False},
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {"console": {"class": "logging.StreamHandler"}},
    "loggers": {"rail_authz": {"handlers": ["console"], "level": "WARNING"}},
}
