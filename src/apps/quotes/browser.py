"""Password-gated overview of stored quote requests.

Used to recover requests when the notification email did not arrive. There is
a single shared password (``QUOTE_ADMIN_PASSWORD``) and no user accounts.
"""

import hmac
import logging
from collections.abc import MutableMapping
from dataclasses import dataclass

from django.conf import settings

from .models import Submission
from .storage import SubmissionStore, get_submission_store

logger = logging.getLogger(__name__)

ADMIN_SESSION_KEY = "quotes_admin_logged_in"


@dataclass(frozen=True)
class SubmissionListing:
    submissions: list[Submission]

    @property
    def count(self) -> int:
        return len(self.submissions)

    @property
    def latest(self) -> Submission | None:
        return self.submissions[0] if self.submissions else None


class SubmissionBrowser:
    """Read-only access to the submission store behind a shared secret."""

    def __init__(self, store: SubmissionStore | None = None) -> None:
        self.store = store if store is not None else get_submission_store()

    @staticmethod
    def is_authenticated(session: MutableMapping) -> bool:
        return bool(session.get(ADMIN_SESSION_KEY))

    @staticmethod
    def authenticate(session: MutableMapping, secret: str) -> bool:
        """Check the shared password and mark the session as logged in on success."""
        expected = settings.QUOTE_ADMIN_PASSWORD
        if not expected:
            logger.warning("QUOTE_ADMIN_PASSWORD is not configured; admin login disabled.")
            return False
        if not secret or not hmac.compare_digest(str(secret).encode(), str(expected).encode()):
            return False
        session[ADMIN_SESSION_KEY] = True
        return True

    @staticmethod
    def logout(session: MutableMapping) -> None:
        """Drop the admin flag only; the visitor's form token and rate-limit marker stay."""
        session.pop(ADMIN_SESSION_KEY, None)

    def render(self) -> SubmissionListing:
        return SubmissionListing(submissions=self.store.list_all())
