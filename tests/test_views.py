"""Tests for the public pages, the quote endpoint and the submissions overview."""

from urllib.parse import parse_qs, urlparse

import pytest
from django.test import Client
from django.urls import reverse

from apps.quotes.browser import ADMIN_SESSION_KEY
from apps.quotes.intake import FORM_TOKEN_SESSION_KEY
from apps.quotes.models import QuoteFields, Submission
from apps.quotes.storage import get_submission_store


def _query(response) -> dict[str, str]:
    """Flatten the redirect query string."""
    return {key: values[0] for key, values in parse_qs(urlparse(response.url).query).items()}


@pytest.fixture
def quote_client(client: Client, submissions_dir) -> Client:
    """A client that has loaded the quote page, so its session holds a form token."""
    client.get(reverse("quotes:quote"))
    return client


@pytest.fixture
def form_payload(quote_client: Client, quote_data: dict) -> dict:
    return {**quote_data, "form_token": quote_client.session[FORM_TOKEN_SESSION_KEY]}


@pytest.fixture
def admin_client(client: Client, submissions_dir) -> Client:
    """Return a client logged in to the submissions overview."""
    client.post(reverse("quotes:admin_submissions"), {"password": "test-admin-secret"})
    return client


class TestPublicViews:
    """Test public-facing views."""

    def test_index_page_loads(self, client: Client) -> None:
        """Test that the homepage loads successfully."""
        response = client.get(reverse("core:index"))
        assert response.status_code == 200

    def test_robots_txt_hides_admin(self, client: Client) -> None:
        response = client.get(reverse("core:robots_txt"))
        assert response.status_code == 200
        assert "Disallow: /beheer/" in response.content.decode()

    def test_quote_page_lists_catalog(self, client: Client) -> None:
        response = client.get(reverse("quotes:quote"))
        assert response.status_code == 200
        content = response.content.decode()
        assert content.count('name="checkbox[]"') == 11
        assert 'name="website"' in content
        assert client.session[FORM_TOKEN_SESSION_KEY] in content

    def test_quote_page_preselects_product(self, client: Client) -> None:
        response = client.get(reverse("quotes:quote"), {"product": "BHV Trainingen"})
        assert 'value="BHV Trainingen" checked' in response.content.decode()

    def test_quote_page_success_box(self, client: Client) -> None:
        response = client.get(reverse("quotes:quote"), {"success": "1", "id": "2025-09-27_14-03-11_abc"})
        content = response.content.decode()
        assert "Bedankt voor uw aanvraag!" in content
        assert "2025-09-27_14-03-11_abc" in content

    def test_quote_page_error_box_with_phone_fallback(self, client: Client) -> None:
        response = client.get(reverse("quotes:quote"), {"error": "1", "reason": "save_error"})
        content = response.content.decode()
        assert "Er is een probleem opgetreden" in content
        assert "040 - 263 02 98" in content

    def test_quote_page_validation_message_is_escaped(self, client: Client) -> None:
        response = client.get(
            reverse("quotes:quote"),
            {"error": "1", "reason": "validation", "msg": "<script>alert(1)</script>"},
        )
        content = response.content.decode()
        assert "<script>alert(1)</script>" not in content
        assert "&lt;script&gt;" in content


class TestQuoteSubmitView:
    """Every submission ends in a redirect to the quote page."""

    def test_successful_submission(self, quote_client: Client, form_payload: dict, mailoutbox) -> None:
        response = quote_client.post(reverse("quotes:quote_submit"), {**form_payload, "checkbox[]": ["Brandblussers"]})

        assert response.status_code == 302
        assert response.url.startswith(reverse("quotes:quote"))
        params = _query(response)
        assert params["success"] == "1"

        stored = get_submission_store().list_all()
        assert [s.id for s in stored] == [params["id"]]
        assert stored[0].services_text == "Brandblussers"
        assert stored[0].ip_address == "127.0.0.1"
        assert len(mailoutbox) == 1

    def test_get_is_rejected(self, quote_client: Client) -> None:
        response = quote_client.get(reverse("quotes:quote_submit"))
        assert response.status_code == 302
        assert _query(response) == {"error": "1", "reason": "method"}

    @pytest.mark.parametrize("method", ["options", "head", "put", "delete"])
    def test_other_methods_are_rejected(self, quote_client: Client, method: str) -> None:
        response = getattr(quote_client, method)(reverse("quotes:quote_submit"))
        assert response.status_code == 302
        assert _query(response) == {"error": "1", "reason": "method"}
        assert get_submission_store().list_all() == []

    def test_second_submission_is_rate_limited(self, quote_client: Client, form_payload: dict) -> None:
        first = quote_client.post(reverse("quotes:quote_submit"), form_payload)
        second = quote_client.post(reverse("quotes:quote_submit"), form_payload)
        assert _query(first)["success"] == "1"
        assert _query(second)["reason"] == "rate_limit"
        assert len(get_submission_store().list_all()) == 1

    def test_missing_token(self, quote_client: Client, quote_data: dict) -> None:
        response = quote_client.post(reverse("quotes:quote_submit"), quote_data)
        assert _query(response)["reason"] == "csrf"

    def test_honeypot(self, quote_client: Client, form_payload: dict) -> None:
        response = quote_client.post(reverse("quotes:quote_submit"), {**form_payload, "website": "spam.example"})
        assert _query(response)["reason"] == "spam"
        assert get_submission_store().list_all() == []

    def test_invalid_email(self, quote_client: Client, form_payload: dict) -> None:
        response = quote_client.post(
            reverse("quotes:quote_submit"), {**form_payload, "emailaddress": "not-an-email"}
        )
        params = _query(response)
        assert params["reason"] == "validation"
        assert "Ongeldig email adres" in params["msg"]
        assert get_submission_store().list_all() == []

    def test_notification_failure_still_succeeds(self, quote_client: Client, form_payload: dict) -> None:
        from unittest.mock import patch

        with patch("apps.quotes.services.EmailMultiAlternatives.send", side_effect=ConnectionError("down")):
            response = quote_client.post(reverse("quotes:quote_submit"), form_payload)
        assert _query(response)["success"] == "1"
        assert len(get_submission_store().list_all()) == 1

    def test_forwarded_ip_is_recorded(self, quote_client: Client, form_payload: dict) -> None:
        quote_client.post(
            reverse("quotes:quote_submit"),
            form_payload,
            HTTP_X_FORWARDED_FOR="198.51.100.4, 10.0.0.1",
            HTTP_USER_AGENT="Mozilla/5.0 (test)",
        )
        stored = get_submission_store().list_all()[0]
        assert stored.ip_address == "198.51.100.4"
        assert stored.user_agent == "Mozilla/5.0 (test)"


class TestSubmissionsAdminView:
    """Tests for the password-gated submissions overview."""

    def test_requires_login(self, client: Client, submissions_dir) -> None:
        response = client.get(reverse("quotes:admin_submissions"))
        assert response.status_code == 200
        content = response.content.decode()
        assert 'type="password"' in content
        assert "Form Submissions Dashboard" not in content

    def test_wrong_password(self, client: Client, submissions_dir) -> None:
        response = client.post(reverse("quotes:admin_submissions"), {"password": "guess"})
        assert response.status_code == 302
        assert ADMIN_SESSION_KEY not in client.session
        follow = client.get(reverse("quotes:admin_submissions"))
        assert "Onjuist wachtwoord." in follow.content.decode()

    def test_login_disabled_without_password(self, settings, client: Client, submissions_dir) -> None:
        settings.QUOTE_ADMIN_PASSWORD = ""
        client.post(reverse("quotes:admin_submissions"), {"password": ""})
        assert ADMIN_SESSION_KEY not in client.session

    def test_empty_state(self, admin_client: Client) -> None:
        response = admin_client.get(reverse("quotes:admin_submissions"))
        content = response.content.decode()
        assert response.status_code == 200
        assert "Totaal aantal aanvragen:</strong> 0" in content
        assert "Geen form submissions gevonden" in content

    def test_lists_newest_first_and_escapes(self, admin_client: Client, quote_fields: QuoteFields) -> None:
        from datetime import datetime

        store = get_submission_store()
        older = Submission.create(fields=quote_fields, now=datetime(2025, 9, 25, 9, 0, 0))
        newer = Submission.create(
            fields=quote_fields.model_copy(update={"company": "<script>alert(1)</script>"}),
            now=datetime(2025, 9, 27, 14, 3, 11),
        )
        store.persist(older)
        store.persist(newer)

        content = admin_client.get(reverse("quotes:admin_submissions")).content.decode()

        assert "Totaal aantal aanvragen:</strong> 2" in content
        assert "Laatste aanvraag:</strong> 2025-09-27 14:03:11" in content
        assert content.index(newer.id) < content.index(older.id)
        assert "<script>alert(1)</script>" not in content
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in content

    def test_logout(self, admin_client: Client) -> None:
        response = admin_client.get(reverse("quotes:admin_submissions"), {"logout": "1"})
        assert response.status_code == 302
        content = admin_client.get(reverse("quotes:admin_submissions")).content.decode()
        assert 'type="password"' in content

    def test_logout_keeps_visitor_session(self, quote_client: Client, form_payload: dict) -> None:
        """Logging out drops the admin flag but not the form token or rate limit."""
        url = reverse("quotes:admin_submissions")
        quote_client.post(reverse("quotes:quote_submit"), form_payload)
        quote_client.post(url, {"password": "test-admin-secret"})
        assert quote_client.session[ADMIN_SESSION_KEY] is True

        quote_client.get(url, {"logout": "1"})

        session = quote_client.session
        assert ADMIN_SESSION_KEY not in session
        assert session[FORM_TOKEN_SESSION_KEY] == form_payload["form_token"]
        retry = quote_client.post(reverse("quotes:quote_submit"), form_payload)
        assert _query(retry)["reason"] == "rate_limit"
