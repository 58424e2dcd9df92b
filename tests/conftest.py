"""Pytest configuration for the Actief Brandbeveiliging tests."""

import pytest

from apps.quotes.models import QuoteFields, Submission
from apps.quotes.storage import FileSubmissionStore, InMemorySubmissionStore


@pytest.fixture
def submissions_dir(tmp_path, settings):
    """Point the file store at a fresh temporary directory."""
    directory = tmp_path / "form-submissions"
    settings.QUOTE_SUBMISSIONS_DIR = directory
    settings.QUOTE_SUBMISSION_STORE = "apps.quotes.storage.FileSubmissionStore"
    return directory


@pytest.fixture
def file_store(submissions_dir) -> FileSubmissionStore:
    return FileSubmissionStore(submissions_dir)


@pytest.fixture
def memory_store() -> InMemorySubmissionStore:
    return InMemorySubmissionStore()


@pytest.fixture
def quote_data() -> dict[str, str]:
    """A complete, valid quote request as posted by the form."""
    return {
        "company": "Acme",
        "firstname": "Jan",
        "lastname": "Jansen",
        "emailaddress": "jan@acme.nl",
        "phonenumber": "0612345678",
        "address": "",
        "message": "Graag een offerte",
        "website": "",
    }


@pytest.fixture
def quote_fields() -> QuoteFields:
    return QuoteFields(
        company="Acme",
        firstname="Jan",
        lastname="Jansen",
        emailaddress="jan@acme.nl",
        phonenumber="0612345678",
        message="Graag een offerte",
    )


@pytest.fixture
def submission(quote_fields: QuoteFields) -> Submission:
    return Submission.create(
        fields=quote_fields,
        services=["Brandblussers"],
        ip_address="203.0.113.7",
        user_agent="Mozilla/5.0",
    )
