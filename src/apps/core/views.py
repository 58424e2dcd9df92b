"""Core app views."""

from django.http import HttpRequest, HttpResponse
from django.views import View
from django.views.generic import TemplateView


class RobotsTxtView(View):
    """Serve robots.txt; keeps crawlers out of the submissions overview."""

    ROBOTS_TXT = (
        "User-agent: *\n"
        "Allow: /\n"
        "Allow: /offerte/\n"
        "\n"
        "Disallow: /beheer/\n"
        "Disallow: /offerte/verzenden/\n"
    )

    def get(self, request: HttpRequest) -> HttpResponse:
        return HttpResponse(self.ROBOTS_TXT, content_type="text/plain")


class IndexView(TemplateView):
    """Public homepage."""

    template_name = "index.html"
