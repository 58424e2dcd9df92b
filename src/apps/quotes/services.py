"""Email notifications for quote requests."""

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from .models import Submission

logger = logging.getLogger(__name__)


def _render_bodies(template_base: str, context: dict) -> tuple[str, str]:
    text_body = render_to_string(f"{template_base}.txt", context)
    html_body = render_to_string(f"{template_base}.html", context)
    return text_body, html_body


def send_quote_notification(submission: Submission) -> bool:
    """
    Email a new quote request to the team.

    Best-effort: any failure is logged and reported as ``False``, never raised.
    Replies go straight to the requester.
    """
    recipients: list[str] = list(getattr(settings, "QUOTE_NOTIFICATION_EMAILS", []))

    if not recipients:
        logger.warning("No QUOTE_NOTIFICATION_EMAILS configured, skipping notification for %s.", submission.id)
        return False

    try:
        text_body, html_body = _render_bodies(
            "emails/quote_notification",
            {"submission": submission, "data": submission.form_data},
        )
        msg = EmailMultiAlternatives(
            subject=settings.QUOTE_EMAIL_SUBJECT,
            body=text_body,
            from_email=settings.QUOTE_FROM_EMAIL,
            to=recipients,
            reply_to=[submission.form_data.emailaddress],
        )
        msg.attach_alternative(html_body, "text/html")
        sent = msg.send(fail_silently=False)
    except Exception:
        logger.exception(
            "Failed to send quote notification for submission %s to %s (stored copy is still on disk)",
            submission.id,
            recipients,
        )
        return False

    if not sent:
        logger.error("Mail backend accepted no messages for submission %s", submission.id)
        return False

    logger.info("Quote notification sent to %s for submission %s", recipients, submission.id)
    return True


def send_quote_confirmation(submission: Submission) -> bool:
    """Send the requester a short acknowledgement. Best-effort, like the team notification."""
    try:
        text_body, html_body = _render_bodies(
            "emails/quote_confirmation",
            {"submission": submission, "data": submission.form_data},
        )
        msg = EmailMultiAlternatives(
            subject=settings.QUOTE_CONFIRMATION_SUBJECT,
            body=text_body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[submission.form_data.emailaddress],
        )
        msg.attach_alternative(html_body, "text/html")
        sent = msg.send(fail_silently=False)
    except Exception:
        logger.exception("Failed to send quote confirmation for submission %s", submission.id)
        return False

    if sent:
        logger.info("Quote confirmation sent for submission %s", submission.id)
    return bool(sent)
