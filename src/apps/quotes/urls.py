"""Quotes app URL configuration."""

from django.urls import path

from . import views

app_name = "quotes"

urlpatterns = [
    path("offerte/", views.QuoteView.as_view(), name="quote"),
    path("offerte/verzenden/", views.QuoteSubmitView.as_view(), name="quote_submit"),
    path("beheer/aanvragen/", views.SubmissionsAdminView.as_view(), name="admin_submissions"),
]
