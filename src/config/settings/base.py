"""
Django base settings for the Actief Brandbeveiliging web application.
"""

from pathlib import Path

import environ

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

env = environ.Env(
    DEBUG=(bool, False),
    ALLOWED_HOSTS=(list, []),
    QUOTE_NOTIFICATION_EMAILS=(list, ["info@actiefbrandbeveiliging.nl"]),
    QUOTE_SEND_CONFIRMATION=(bool, False),
    EMAIL_TIMEOUT=(int, 10),
)

# Read .env file from project root (parent of src/)
env_file = BASE_DIR.parent / ".env"
if env_file.exists():
    environ.Env.read_env(str(env_file))

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = env("SECRET_KEY", default="django-insecure-change-me-in-production")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = env("DEBUG")

ALLOWED_HOSTS = env("ALLOWED_HOSTS")

# Application definition
INSTALLED_APPS = [
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third party
    "anymail",
    # Local apps
    "apps.core",
    "apps.quotes",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.messages.context_processors.messages",
                "apps.core.context_processors.site_context",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

# No database: submissions live on the filesystem
DATABASES = {}

# Sessions carry the rate-limit marker, the form token and the admin flag
SESSION_ENGINE = env("SESSION_ENGINE", default="django.contrib.sessions.backends.signed_cookies")
SESSION_COOKIE_HTTPONLY = True
MESSAGE_STORAGE = "django.contrib.messages.storage.cookie.CookieStorage"

# Internationalization
LANGUAGE_CODE = "nl"
TIME_ZONE = "Europe/Amsterdam"
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = "static/"
STATICFILES_DIRS = [BASE_DIR / "static"]
STATIC_ROOT = BASE_DIR.parent / "staticfiles"

# WhiteNoise configuration
STORAGES = {
    "staticfiles": {
        "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage",
    },
}

# Email configuration
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"
DEFAULT_FROM_EMAIL = "Actief Brandbeveiliging B.V. <noreply@actiefbrandbeveiliging.nl>"
# Bounds every outbound mail call (SMTP socket and Anymail HTTP requests)
EMAIL_TIMEOUT = env("EMAIL_TIMEOUT")

# Anymail (Mailgun)
ANYMAIL = {
    "MAILGUN_API_KEY": env("MAILGUN_API_KEY", default=""),
    "MAILGUN_SENDER_DOMAIN": env("MAILGUN_DOMAIN", default="actiefbrandbeveiliging.nl"),
    "MAILGUN_API_URL": env("MAILGUN_API_URL", default="https://api.eu.mailgun.net/v3"),
    "REQUESTS_TIMEOUT": EMAIL_TIMEOUT,
}

# Quote requests
QUOTE_SUBMISSIONS_DIR = Path(env("QUOTE_SUBMISSIONS_DIR", default=str(BASE_DIR.parent / "form-submissions")))
QUOTE_SUBMISSION_STORE = env("QUOTE_SUBMISSION_STORE", default="apps.quotes.storage.FileSubmissionStore")
QUOTE_NOTIFICATION_EMAILS = env("QUOTE_NOTIFICATION_EMAILS")
QUOTE_FROM_EMAIL = env(
    "QUOTE_FROM_EMAIL",
    default="Actief Brandbeveiliging Website <website@actiefbrandbeveiliging.nl>",
)
QUOTE_EMAIL_SUBJECT = "Nieuwe Offerte Aanvraag - Actief Brandbeveiliging"
QUOTE_CONFIRMATION_SUBJECT = "Bevestiging van uw offerte aanvraag - Actief Brandbeveiliging"
QUOTE_ADMIN_PASSWORD = env("QUOTE_ADMIN_PASSWORD", default="")
QUOTE_RATE_LIMIT_SECONDS = 60
QUOTE_REQUIRE_FORM_TOKEN = True
# When True a failed notification is reported to the visitor as reason=email_send
QUOTE_REQUIRE_EMAIL_DELIVERY = False
QUOTE_SEND_CONFIRMATION = env("QUOTE_SEND_CONFIRMATION")

# Site
SITE_URL = env("SITE_URL", default="https://actiefbrandbeveiliging.nl")
SITE_PHONE = "+31402630298"
SITE_PHONE_DISPLAY = "040 - 263 02 98"

# Logging
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
            "handlers": ["console"],
            "level": env("APPS_LOG_LEVEL", default="INFO"),
            "propagate": False,
        },
    },
}
