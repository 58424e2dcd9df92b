"""Sanitisation and validation of quote form input.

Everything in here is pure: no I/O, no session access, no logging.
"""

import re
from dataclasses import dataclass
from html import escape, unescape

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.utils.html import strip_tags

from .models import FORM_FIELDS, REQUIRED_FIELDS, SERVICE_CATALOG, QuoteFields

PHONE_PATTERN = re.compile(r"^\+?[0-9 \-()]{6,20}$")

# Keys the intake endpoint understands besides the form fields themselves
SERVICES_KEY = "checkbox[]"
HONEYPOT_KEY = "website"
FORM_TOKEN_KEY = "form_token"
ACCEPTED_KEYS = frozenset({*FORM_FIELDS, SERVICES_KEY, HONEYPOT_KEY, FORM_TOKEN_KEY})


@dataclass(frozen=True)
class FieldError:
    """A single validation failure."""

    code: str
    message: str
    field: str = ""


class QuoteValidationError(Exception):
    """Raised when quote input fails validation. Carries every error found."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = errors
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return ", ".join(error.message for error in self.errors)


class SpamDetected(QuoteValidationError):
    """The honeypot field was filled in."""

    def __init__(self) -> None:
        super().__init__([FieldError(code="spam", message="Spam gedetecteerd", field=HONEYPOT_KEY)])


def missing_field(name: str) -> FieldError:
    return FieldError(code="missing_field", message=f"Veld '{name}' is verplicht", field=name)


def invalid_email() -> FieldError:
    return FieldError(code="invalid_email", message="Ongeldig email adres", field="emailaddress")


def invalid_phone() -> FieldError:
    return FieldError(code="invalid_phone", message="Ongeldig telefoonnummer", field="phonenumber")


def unknown_field(name: str) -> FieldError:
    return FieldError(code="unknown_field", message=f"Onbekend veld '{name}'", field=name)


def unknown_service(label: str) -> FieldError:
    return FieldError(code="unknown_service", message=f"Onbekende dienst '{label}'", field=SERVICES_KEY)


def sanitize(value) -> str:
    """
    Trim, strip markup and HTML-escape a raw value.

    Entities are decoded before escaping so that sanitising an already
    sanitised value returns it unchanged.
    """
    if value is None:
        return ""
    return escape(strip_tags(unescape(str(value))).strip())


def is_valid_email(value: str) -> bool:
    try:
        validate_email(value)
    except ValidationError:
        return False
    return True


def is_valid_phone(value: str) -> bool:
    return bool(PHONE_PATTERN.match(value))


def check_honeypot(value) -> None:
    """Raise SpamDetected when the hidden honeypot field carries any content."""
    if value not in (None, ""):
        raise SpamDetected


def validate(raw_fields, raw_services=(), *, extra_keys=()) -> tuple[QuoteFields, tuple[str, ...]]:
    """
    Sanitise and validate one quote request.

    Args:
        raw_fields: Mapping of form field name to raw string value.
        raw_services: Selected service labels (``checkbox[]``).
        extra_keys: Other submitted keys; anything outside ACCEPTED_KEYS is rejected.

    Returns:
        The sanitised field record and the de-duplicated service labels in
        selection order.

    Raises:
        SpamDetected: the honeypot field is filled in (checked first).
        QuoteValidationError: with all other errors accumulated.

    """
    check_honeypot(raw_fields.get(HONEYPOT_KEY))

    errors: list[FieldError] = []

    for key in extra_keys:
        if key not in ACCEPTED_KEYS:
            errors.append(unknown_field(key))

    cleaned = {name: sanitize(raw_fields.get(name)) for name in FORM_FIELDS}

    for name in REQUIRED_FIELDS:
        if not cleaned[name]:
            errors.append(missing_field(name))

    if not is_valid_email(cleaned["emailaddress"]):
        errors.append(invalid_email())

    if not is_valid_phone(cleaned["phonenumber"]):
        errors.append(invalid_phone())

    services: list[str] = []
    for raw in raw_services:
        label = sanitize(raw)
        if not label:
            continue
        if label not in SERVICE_CATALOG:
            errors.append(unknown_service(label))
        elif label not in services:
            services.append(label)

    if errors:
        raise QuoteValidationError(errors)

    return QuoteFields(**cleaned), tuple(services)
