"""Quote request intake.

One submission runs through these checks in order, and any of them can end it:

    method -> rate limit -> form token -> honeypot -> validation -> persist -> notify

The result is always an ``IntakeOutcome``: either success with the new
submission id, or an error with a machine-readable reason code. Storing the
request is what counts. A failed notification is logged and otherwise
ignored (unless ``QUOTE_REQUIRE_EMAIL_DELIVERY`` is switched on).
"""

import hmac
import logging
import secrets
import time
from collections.abc import Callable, Mapping, MutableMapping
from dataclasses import dataclass, field

from django.conf import settings

from . import validators
from .models import Submission
from .services import send_quote_confirmation, send_quote_notification
from .storage import StoreError, SubmissionStore, get_submission_store

logger = logging.getLogger(__name__)

LAST_SUBMISSION_KEY = "quotes_last_submission"
FORM_TOKEN_SESSION_KEY = "quotes_form_token"

REASON_METHOD = "method"
REASON_RATE_LIMIT = "rate_limit"
REASON_CSRF = "csrf"
REASON_SPAM = "spam"
REASON_VALIDATION = "validation"
REASON_SAVE_ERROR = "save_error"
REASON_DIRECTORY_ERROR = "directory_error"
REASON_EMAIL_SEND = "email_send"


@dataclass
class IntakeRequest:
    """Everything the intake needs from one HTTP request."""

    method: str
    data: Mapping[str, str]
    session: MutableMapping
    services: list[str] = field(default_factory=list)
    ip_address: str = ""
    user_agent: str = ""


@dataclass(frozen=True)
class IntakeOutcome:
    ok: bool
    reason: str = ""
    message: str = ""
    submission_id: str = ""

    @classmethod
    def success(cls, submission_id: str) -> "IntakeOutcome":
        return cls(ok=True, submission_id=submission_id)

    @classmethod
    def error(cls, reason: str, message: str = "") -> "IntakeOutcome":
        return cls(ok=False, reason=reason, message=message)

    def query_params(self) -> dict[str, str]:
        """Query string parameters for the redirect back to the quote page."""
        if self.ok:
            return {"success": "1", "id": self.submission_id}
        params = {"error": "1", "reason": self.reason}
        if self.message:
            params["msg"] = self.message
        return params


def issue_form_token(session: MutableMapping) -> str:
    """Return the session's form token, creating one on first use."""
    token = session.get(FORM_TOKEN_SESSION_KEY)
    if not token:
        token = secrets.token_urlsafe(32)
        session[FORM_TOKEN_SESSION_KEY] = token
    return token


class IntakeService:
    """Orchestrates validation, storage and notification of a quote request."""

    def __init__(
        self,
        store: SubmissionStore | None = None,
        *,
        notifier: Callable[[Submission], bool] = send_quote_notification,
        confirmer: Callable[[Submission], bool] = send_quote_confirmation,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store if store is not None else get_submission_store()
        self.notifier = notifier
        self.confirmer = confirmer
        self.clock = clock

    def _rate_limited(self, session: MutableMapping) -> bool:
        last = session.get(LAST_SUBMISSION_KEY)
        if last is None:
            return False
        return self.clock() - float(last) < settings.QUOTE_RATE_LIMIT_SECONDS

    def _token_valid(self, session: MutableMapping, token: str) -> bool:
        if not settings.QUOTE_REQUIRE_FORM_TOKEN:
            return True
        expected = session.get(FORM_TOKEN_SESSION_KEY)
        if not expected or not token:
            return False
        return hmac.compare_digest(str(expected).encode(), str(token).encode())

    def handle(self, request: IntakeRequest) -> IntakeOutcome:
        """Run one quote request through the intake checks."""
        ip = request.ip_address or "Unknown"
        logger.info("Quote submission attempt from IP %s", ip)

        if request.method.upper() != "POST":
            logger.warning("Rejected quote submission from %s: method %s", ip, request.method)
            return IntakeOutcome.error(REASON_METHOD)

        if self._rate_limited(request.session):
            logger.warning("Rejected quote submission from %s: rate limited", ip)
            return IntakeOutcome.error(REASON_RATE_LIMIT)

        if not self._token_valid(request.session, request.data.get(validators.FORM_TOKEN_KEY, "")):
            logger.warning("Rejected quote submission from %s: invalid form token", ip)
            return IntakeOutcome.error(REASON_CSRF)

        try:
            fields, services = validators.validate(
                request.data,
                request.services,
                extra_keys=request.data.keys(),
            )
        except validators.SpamDetected:
            logger.warning("Rejected quote submission from %s: honeypot filled", ip)
            return IntakeOutcome.error(REASON_SPAM)
        except validators.QuoteValidationError as exc:
            logger.warning("Rejected quote submission from %s: %s", ip, exc.message)
            return IntakeOutcome.error(REASON_VALIDATION, exc.message)

        submission = Submission.create(
            fields=fields,
            services=services,
            ip_address=request.ip_address,
            user_agent=request.user_agent,
        )

        try:
            self.store.persist(submission)
        except StoreError as exc:
            logger.exception(
                "CRITICAL: failed to store quote submission %s (%s). Form data: %s, services: %s",
                submission.id,
                exc,
                fields.model_dump(),
                list(services),
            )
            return IntakeOutcome.error(exc.reason)

        logger.info("Stored quote submission %s (%d services)", submission.id, len(services))
        request.session[LAST_SUBMISSION_KEY] = self.clock()

        email_sent = self._notify(self.notifier, submission)
        if settings.QUOTE_SEND_CONFIRMATION:
            self._notify(self.confirmer, submission)

        logger.info("Quote submission %s completed (email sent: %s)", submission.id, "yes" if email_sent else "no")

        if not email_sent and settings.QUOTE_REQUIRE_EMAIL_DELIVERY:
            return IntakeOutcome.error(REASON_EMAIL_SEND)
        return IntakeOutcome.success(submission.id)

    @staticmethod
    def _notify(send: Callable[[Submission], bool], submission: Submission) -> bool:
        # A raising notifier counts as "not sent".
        try:
            return bool(send(submission))
        except Exception:
            logger.exception("Notifier %r raised for submission %s", send, submission.id)
            return False
