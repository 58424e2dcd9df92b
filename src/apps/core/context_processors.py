"""Context processors for the core app."""

from django.conf import settings
from django.http import HttpRequest


def site_context(request: HttpRequest) -> dict:
    """Add site-wide context variables to all templates."""
    return {
        "SITE_NAME": "Actief Brandbeveiliging B.V.",
        "SITE_TAGLINE": "Uw partner in brandbeveiliging",
        "SITE_PHONE": getattr(settings, "SITE_PHONE", ""),
        "SITE_PHONE_DISPLAY": getattr(settings, "SITE_PHONE_DISPLAY", ""),
        "SITE_EMAIL": "info@actiefbrandbeveiliging.nl",
    }
