"""Quote request views."""

import logging
from urllib.parse import urlencode

from django.contrib import messages
from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from django.views.generic import TemplateView

from . import intake
from .browser import SubmissionBrowser
from .models import SERVICE_CATALOG
from .validators import SERVICES_KEY

logger = logging.getLogger(__name__)

DEFAULT_ERROR_TEXT = "Er is een fout opgetreden bij het verzenden van uw aanvraag."

ERROR_TEXTS = {
    intake.REASON_RATE_LIMIT: "U heeft recentelijk al een aanvraag verstuurd. Wacht even voordat u opnieuw probeert.",
    intake.REASON_SPAM: "Uw aanvraag werd gemarkeerd als spam. Neem direct contact met ons op.",
    intake.REASON_VALIDATION: "Sommige velden zijn niet correct ingevuld. Controleer uw gegevens.",
    intake.REASON_CSRF: "Uw sessie is verlopen. Vernieuw de pagina en probeer het opnieuw.",
    intake.REASON_METHOD: "Het formulier kon niet worden verwerkt. Gebruik het formulier op deze pagina.",
    intake.REASON_EMAIL_SEND: (
        "Er is een probleem opgetreden bij het verzenden. "
        "Probeer het later opnieuw of neem direct contact met ons op via telefoon."
    ),
    intake.REASON_SAVE_ERROR: "Het formulier kon helaas niet worden verzonden. Probeer het later opnieuw.",
    intake.REASON_DIRECTORY_ERROR: "Het formulier kon helaas niet worden verzonden. Probeer het later opnieuw.",
}


def get_client_ip(request: HttpRequest) -> str:
    """Extract client IP, respecting X-Forwarded-For behind a proxy."""
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "")


def error_text(reason: str, msg: str = "") -> str:
    """Visitor-facing text for an error redirect."""
    if reason == intake.REASON_VALIDATION:
        return msg or ERROR_TEXTS[reason]
    return ERROR_TEXTS.get(reason) or msg or DEFAULT_ERROR_TEXT


class QuoteView(TemplateView):
    """Offerte page: the quote request form plus success/error feedback."""

    template_name = "quotes/quote.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        params = self.request.GET
        context["form_token"] = intake.issue_form_token(self.request.session)
        context["services"] = SERVICE_CATALOG
        context["selected_product"] = params.get("product", "")
        context["success"] = params.get("success") == "1"
        context["submission_id"] = params.get("id", "")
        context["error"] = params.get("error") == "1"
        if context["error"]:
            context["error_reason"] = params.get("reason", "")
            context["error_text"] = error_text(context["error_reason"], params.get("msg", ""))
        return context


@method_decorator(csrf_exempt, name="dispatch")
class QuoteSubmitView(View):
    """Handle quote form submissions. Every outcome is a redirect to the quote page."""

    service_class = intake.IntakeService

    def dispatch(self, request: HttpRequest, *args, **kwargs) -> HttpResponse:
        # Every method, OPTIONS and HEAD included, goes through the intake;
        # it rejects anything but POST with reason=method.
        return self._handle(request)

    def _handle(self, request: HttpRequest) -> HttpResponse:
        outcome = self.service_class().handle(
            intake.IntakeRequest(
                method=request.method,
                data={key: request.POST.get(key, "") for key in request.POST},
                services=request.POST.getlist(SERVICES_KEY),
                session=request.session,
                ip_address=get_client_ip(request),
                user_agent=request.META.get("HTTP_USER_AGENT", ""),
            )
        )
        return redirect(f"{reverse('quotes:quote')}?{urlencode(outcome.query_params())}")


class SubmissionsAdminView(View):
    """Shared-password overview of every stored quote request, newest first."""

    template_name = "quotes/admin_submissions.html"
    login_template_name = "quotes/admin_login.html"

    def get(self, request: HttpRequest) -> HttpResponse:
        if request.GET.get("logout"):
            SubmissionBrowser.logout(request.session)
            request.session.cycle_key()
            logger.info("Admin logout from %s", get_client_ip(request))
            return redirect("quotes:admin_submissions")

        browser = SubmissionBrowser()
        if not browser.is_authenticated(request.session):
            return render(request, self.login_template_name)

        listing = browser.render()
        return render(request, self.template_name, {"listing": listing})

    def post(self, request: HttpRequest) -> HttpResponse:
        if SubmissionBrowser.authenticate(request.session, request.POST.get("password", "")):
            request.session.cycle_key()
            logger.info("Admin login from %s", get_client_ip(request))
        else:
            logger.warning("Failed admin login from %s", get_client_ip(request))
            messages.error(request, "Onjuist wachtwoord.")
        return redirect("quotes:admin_submissions")
