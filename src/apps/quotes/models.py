"""Quote request records.

Submissions are not database rows: they are immutable pydantic records that
the submission store serialises to disk (see ``storage.py``).
"""

import uuid
from datetime import UTC, datetime

from django.utils import timezone
from pydantic import BaseModel, Field

SERVICE_CATALOG: tuple[str, ...] = (
    "Onderhoud Brandmeldsystemen",
    "Brandblussers",
    "Onderhoud Kleineblusmiddelen",
    "Brandslanghaspels",
    "Onderhoud Noodverlichting",
    "Brandmelders",
    "BHV Trainingen",
    "Blusdekens",
    "EHBO-Koffers",
    "Noodverlichtingen",
    "Pictogrammen",
)

REQUIRED_FIELDS: tuple[str, ...] = (
    "company",
    "firstname",
    "lastname",
    "emailaddress",
    "phonenumber",
    "message",
)

FORM_FIELDS: tuple[str, ...] = (
    "company",
    "firstname",
    "lastname",
    "emailaddress",
    "phonenumber",
    "address",
    "message",
)

NO_SERVICES_TEXT = "Geen specifieke diensten geselecteerd"
NO_ADDRESS_TEXT = "Niet opgegeven"
UNKNOWN = "Unknown"

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
ID_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
CREATED_AT_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def generate_submission_id(now: datetime | None = None) -> str:
    """
    Generate a unique, chronologically sortable submission id.

    Format: ``YYYY-MM-DD_HH-MM-SS_<13 hex chars>``.
    """
    now = now or timezone.localtime()
    return f"{now.strftime(ID_TIMESTAMP_FORMAT)}_{uuid.uuid4().hex[:13]}"


def summarise_services(services) -> str:
    """Human-readable services line, or the fixed placeholder when none were chosen."""
    return ", ".join(services) if services else NO_SERVICES_TEXT


class QuoteFields(BaseModel):
    """The fixed, sanitised field set of a quote request."""

    model_config = {"frozen": True, "extra": "forbid"}

    company: str
    firstname: str
    lastname: str
    emailaddress: str
    phonenumber: str
    address: str = ""
    message: str

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.lastname}"

    @property
    def address_display(self) -> str:
        return self.address or NO_ADDRESS_TEXT


class Submission(BaseModel):
    """A persisted quote request. Immutable once created."""

    model_config = {"frozen": True}

    id: str
    timestamp: str = Field(..., description="Creation time, 'YYYY-MM-DD HH:MM:SS' local time")
    created_at: str = Field("", description="Creation time, 'YYYY-MM-DDTHH:MM:SSZ' UTC")
    ip_address: str = UNKNOWN
    user_agent: str = UNKNOWN
    form_data: QuoteFields
    services: tuple[str, ...] = ()
    services_text: str = NO_SERVICES_TEXT

    @classmethod
    def create(
        cls,
        *,
        fields: QuoteFields,
        services=(),
        ip_address: str = "",
        user_agent: str = "",
        now: datetime | None = None,
    ) -> "Submission":
        """Build a new submission with a freshly generated id."""
        now = now or timezone.localtime()
        if timezone.is_naive(now):
            now = timezone.make_aware(now)
        services = tuple(services)
        return cls(
            id=generate_submission_id(now),
            timestamp=now.strftime(TIMESTAMP_FORMAT),
            created_at=now.astimezone(UTC).strftime(CREATED_AT_FORMAT),
            ip_address=ip_address or UNKNOWN,
            user_agent=user_agent or UNKNOWN,
            form_data=fields,
            services=services,
            services_text=summarise_services(services),
        )

    def __str__(self) -> str:
        return f"{self.form_data.company} - {self.form_data.emailaddress} ({self.timestamp})"
