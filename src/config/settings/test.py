"""
Django test settings for the Actief Brandbeveiliging web application.
"""

from .base import *  # noqa: F403
from .base import BASE_DIR

DEBUG = False

SECRET_KEY = "django-insecure-test-key-only"  # noqa: S105

ALLOWED_HOSTS = ["*"]

# Use in-memory email backend
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# Cache-backed sessions so tests can read and seed client.session
SESSION_ENGINE = "django.contrib.sessions.backends.cache"
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    },
}

# Tests point this at tmp_path; the default keeps stray writes out of the repo
QUOTE_SUBMISSIONS_DIR = BASE_DIR.parent / ".pytest-submissions"
QUOTE_ADMIN_PASSWORD = "test-admin-secret"  # noqa: S105
QUOTE_NOTIFICATION_EMAILS = ["info@actiefbrandbeveiliging.nl"]
QUOTE_SEND_CONFIRMATION = False

# Use simple static files storage in tests
STORAGES = {
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}
